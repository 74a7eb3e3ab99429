"""
User Repository.

Covers students, their profiles and custodian profiles. Student
lookups exclude soft-deleted users.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.models.user.custodian import CustodianProfile
from hostel_ledger.models.user.student_profile import StudentProfile
from hostel_ledger.models.user.user import User


class UserRepository:
    """Repository for users and their role profiles."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    # ==================== CREATE OPERATIONS ====================

    def create_user(self, email: str, name: str, role: UserRole, hostel_id: Optional[UUID]) -> User:
        user = User(
            email=email.strip().lower(),
            name=name.strip(),
            role=role,
            hostel_id=hostel_id,
            is_deleted=False,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def upsert_student_profile(self, user_id: UUID, profile_data: Dict[str, Any]) -> StudentProfile:
        profile = self.get_student_profile(user_id)
        if profile is None:
            profile = StudentProfile(user_id=user_id, **profile_data)
            self.db.add(profile)
        else:
            for field, value in profile_data.items():
                if value is not None:
                    setattr(profile, field, value)
        self.db.flush()
        return profile

    # ==================== READ OPERATIONS ====================

    def get_by_id(self, user_id: UUID) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.strip().lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def get_student(self, student_id: UUID, hostel_id: UUID) -> Optional[User]:
        """A live user with role ``user`` belonging to the hostel."""
        stmt = select(User).where(
            User.id == student_id,
            User.hostel_id == hostel_id,
            User.role == UserRole.USER,
            User.is_deleted.is_(False),
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_students(self, hostel_id: UUID) -> List[User]:
        stmt = (
            select(User)
            .where(
                User.hostel_id == hostel_id,
                User.role == UserRole.USER,
                User.is_deleted.is_(False),
            )
            .order_by(User.name.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_student_profile(self, user_id: UUID) -> Optional[StudentProfile]:
        stmt = select(StudentProfile).where(StudentProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_custodian_profile(self, user_id: UUID) -> Optional[CustodianProfile]:
        stmt = select(CustodianProfile).where(CustodianProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    # ==================== UPDATE / DELETE OPERATIONS ====================

    def restore(self, user: User, name: str, hostel_id: UUID) -> User:
        user.is_deleted = False
        user.deleted_at = None
        user.name = name.strip()
        user.hostel_id = hostel_id
        self.db.flush()
        return user

    def soft_delete(self, user: User, deleted_at: datetime) -> None:
        user.is_deleted = True
        user.deleted_at = deleted_at
        self.db.flush()
