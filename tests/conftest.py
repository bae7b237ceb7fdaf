"""Shared test fixtures and helpers."""

import os
from datetime import date, time, timedelta
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_notifier
from app.core.config import JWT_ALGORITHM, SECRET_KEY
from app.core.security import CurrentUser
from app.db.base import Base, get_db
from app.db.models.booking import Booking
from app.db.models.category import ServiceCategory
from app.db.models.user import CompanionApplication, User, UserRole
from app.main import app
from app.services.notifications import NotificationSender

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: NotificationSender(TestingSession)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, name, roles=("client",), approved=False):
    user = User(email=f"{name.lower()}@example.com", name=name)
    db.add(user)
    db.flush()
    for role in roles:
        db.add(UserRole(user_id=user.id, role=role, is_active=True))
    if "companion" in roles:
        db.add(CompanionApplication(user_id=user.id, status="approved" if approved else "pending"))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def alice(db):
    """A client."""
    return make_user(db, "Alice")


@pytest.fixture
def bob(db):
    """A second client."""
    return make_user(db, "Bob")


@pytest.fixture
def carol(db):
    """An approved companion."""
    return make_user(db, "Carol", roles=("client", "companion"), approved=True)


@pytest.fixture
def category(db):
    cat = ServiceCategory(name="Dinner date", base_price=Decimal("50.00"), is_active=True)
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


def as_user(user, role="client"):
    return CurrentUser(id=user.id, role=role, roles=frozenset(user.active_roles))


def token_for(user, role="client"):
    return jwt.encode({"sub": str(user.id), "role": role}, SECRET_KEY, algorithm=JWT_ALGORITHM)


def auth_header(user, role="client"):
    return {"Authorization": f"Bearer {token_for(user, role)}"}


def next_weekday(weekday: int) -> date:
    """A date at least a week ahead that falls on `weekday` (0 = Monday)."""
    today = date.today()
    return today + timedelta(days=7 + (weekday - today.weekday()) % 7)


def t(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def insert_booking(db, client, companion, day, start, end, status="pending"):
    """Write a booking row directly, bypassing the lifecycle checks."""
    booking = Booking(
        client_id=client.id,
        companion_id=companion.id,
        booking_date=day,
        start_time=t(start),
        end_time=t(end),
        duration_hours=1.0,
        total_amount=Decimal("35.00"),
        status=status,
        meeting_type="virtual",
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking
