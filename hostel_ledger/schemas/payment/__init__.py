from hostel_ledger.schemas.payment.payment import (
    BalanceView,
    HostelPaymentSummary,
    PaymentCreate,
    PaymentListItem,
    PaymentReceipt,
    PaymentResponse,
    StudentBalanceSummary,
)

__all__ = [
    "BalanceView",
    "HostelPaymentSummary",
    "PaymentCreate",
    "PaymentListItem",
    "PaymentReceipt",
    "PaymentResponse",
    "StudentBalanceSummary",
]
