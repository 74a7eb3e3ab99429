"""
Application service container.

All services of one application share a single ``BalanceSummaryCache``
so that writes in one service invalidate what another serves.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session

from hostel_ledger.config.settings import Settings
from hostel_ledger.core.cache import CacheBackend, MemoryBackend, RedisBackend
from hostel_ledger.services.communication.email_service import (
    EmailSender,
    NotificationService,
    build_email_sender,
)
from hostel_ledger.services.payment.payment_service import PaymentService
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache
from hostel_ledger.services.payment.summary_service import BalanceSummaryService
from hostel_ledger.services.room.assignment_service import AssignmentService
from hostel_ledger.services.room.room_service import RoomService
from hostel_ledger.services.student.student_service import StudentService
from hostel_ledger.services.subscription.login_gate import LoginGateService
from hostel_ledger.services.subscription.plan_service import PlanService
from hostel_ledger.services.subscription.subscription_service import SubscriptionService
from hostel_ledger.utils.date_utils import Clock

logger = logging.getLogger(__name__)


def build_cache_backend(settings: Settings) -> CacheBackend:
    if settings.CACHE_BACKEND == "redis":
        logger.info("Using Redis cache backend for balance summaries")
        return RedisBackend.from_url(settings.REDIS_URL)
    return MemoryBackend()


@dataclass
class ServiceContainer:
    session_factory: Callable[[], Session]
    summary_cache: BalanceSummaryCache
    notifications: NotificationService
    rooms: RoomService
    assignments: AssignmentService
    students: StudentService
    payments: PaymentService
    summaries: BalanceSummaryService
    plans: PlanService
    subscriptions: SubscriptionService
    login_gate: LoginGateService

    @classmethod
    def build(
        cls,
        settings: Settings,
        session_factory: Callable[[], Session],
        clock: Optional[Clock] = None,
        email_sender: Optional[EmailSender] = None,
        cache_backend: Optional[CacheBackend] = None,
    ) -> "ServiceContainer":
        """Wire every service against one session factory, clock and cache."""
        summary_cache = BalanceSummaryCache(
            backend=cache_backend or build_cache_backend(settings),
            ttl_seconds=settings.SUMMARY_CACHE_TTL_SECONDS,
            clock=clock,
        )
        notifications = NotificationService(email_sender or build_email_sender(settings))
        currency = settings.DEFAULT_CURRENCY

        return cls(
            session_factory=session_factory,
            summary_cache=summary_cache,
            notifications=notifications,
            rooms=RoomService(session_factory, summary_cache, clock),
            assignments=AssignmentService(session_factory, summary_cache, clock),
            students=StudentService(session_factory, summary_cache, notifications, clock, currency),
            payments=PaymentService(session_factory, summary_cache, notifications, clock, currency),
            summaries=BalanceSummaryService(session_factory, summary_cache, clock),
            plans=PlanService(session_factory, clock),
            subscriptions=SubscriptionService(
                session_factory, clock, provisional_days=settings.SUBSCRIPTION_PROVISIONAL_DAYS
            ),
            login_gate=LoginGateService(
                session_factory, clock, warning_days=settings.SUBSCRIPTION_WARNING_DAYS
            ),
        )
