# app/db/models/user.py
from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)

    # running review aggregates, recomputed on every new review
    avg_rating = Column(Float, nullable=False, default=0, server_default="0")
    review_count = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    roles = relationship("UserRole", back_populates="user", lazy="selectin", cascade="all, delete-orphan")
    application = relationship("CompanionApplication", back_populates="user", uselist=False, lazy="selectin")
    availabilities = relationship("AvailabilitySlot", back_populates="companion", lazy="selectin")

    @property
    def active_roles(self):
        return {r.role for r in self.roles if r.is_active}


class UserRole(Base):
    """
    A user may hold several roles (client, companion, admin).
    Which one is in use is decided per session, not stored here.
    """
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="roles")


class CompanionApplication(Base):
    __tablename__ = "companion_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    status = Column(String, nullable=False, default="pending")   # pending | approved | rejected
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="application")
