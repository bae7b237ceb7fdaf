# app/db/models/category.py
from sqlalchemy import Boolean, Column, Integer, Numeric, String
from app.db.base import Base


class ServiceCategory(Base):
    __tablename__ = "service_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)   # per hour
    is_active = Column(Boolean, nullable=False, default=True)
