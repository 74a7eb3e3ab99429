from hostel_ledger.schemas.auth.current_user import CurrentUser

__all__ = ["CurrentUser"]
