"""Hostel Repository."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hostel_ledger.models.hostel.hostel import Hostel


class HostelRepository:
    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    def create_hostel(self, hostel_data: Dict[str, Any]) -> Hostel:
        hostel = Hostel(**hostel_data)
        self.db.add(hostel)
        self.db.flush()
        return hostel

    def get_by_id(self, hostel_id: UUID) -> Optional[Hostel]:
        return self.db.get(Hostel, hostel_id)

    def lock_by_id(self, hostel_id: UUID) -> Optional[Hostel]:
        stmt = select(Hostel).where(Hostel.id == hostel_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def list_all(self) -> List[Hostel]:
        return list(self.db.execute(select(Hostel).order_by(Hostel.name.asc())).scalars().all())

    def set_current_subscription(self, hostel: Hostel, subscription_id: Optional[UUID]) -> Hostel:
        hostel.current_subscription_id = subscription_id
        self.db.flush()
        return hostel
