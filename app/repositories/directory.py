"""Companion directory and service category lookups"""

from typing import Optional

from sqlalchemy.orm import Session

from app.db.models.category import ServiceCategory
from app.db.models.user import CompanionApplication, User, UserRole


class DirectoryRepository:

    @staticmethod
    def get_user(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def is_bookable_companion(db: Session, companion_id: int) -> bool:
        """Approved application and an active companion role."""
        row = (
            db.query(User.id)
            .join(CompanionApplication, CompanionApplication.user_id == User.id)
            .join(UserRole, UserRole.user_id == User.id)
            .filter(
                User.id == companion_id,
                CompanionApplication.status == "approved",
                UserRole.role == "companion",
                UserRole.is_active.is_(True),
            )
            .first()
        )
        return row is not None

    @staticmethod
    def get_active_category(db: Session, category_id: int) -> Optional[ServiceCategory]:
        return (
            db.query(ServiceCategory)
            .filter(ServiceCategory.id == category_id, ServiceCategory.is_active.is_(True))
            .first()
        )
