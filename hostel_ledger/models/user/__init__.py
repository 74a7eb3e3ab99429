from hostel_ledger.models.user.custodian import CustodianProfile
from hostel_ledger.models.user.student_profile import StudentProfile
from hostel_ledger.models.user.user import User

__all__ = ["CustodianProfile", "StudentProfile", "User"]
