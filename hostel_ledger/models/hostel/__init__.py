from hostel_ledger.models.hostel.hostel import Hostel

__all__ = ["Hostel"]
