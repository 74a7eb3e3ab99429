from hostel_ledger.repositories.hostel.hostel_repository import HostelRepository

__all__ = ["HostelRepository"]
