from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from hostel_ledger.core.cache import MemoryBackend
from hostel_ledger.schemas.payment.payment import HostelPaymentSummary, PaymentCreate
from hostel_ledger.schemas.student.student import StudentCreate
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache


def _summary(hostel_id):
    return HostelPaymentSummary(
        hostel_id=hostel_id,
        total_collected=Decimal("0"),
        total_outstanding=Decimal("0"),
        computed_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


class TestBalanceSummaryCache:
    def test_entry_lives_for_ttl(self, clock):
        cache = BalanceSummaryCache(MemoryBackend(), ttl_seconds=10, clock=clock)
        hostel_id = uuid4()
        summary = _summary(hostel_id)

        entry = cache.put(hostel_id, summary)
        assert entry.expires_at == clock() + timedelta(seconds=10)

        clock.advance(seconds=9)
        assert cache.get(hostel_id) is summary

        clock.advance(seconds=1)
        assert cache.get(hostel_id) is None

    def test_invalidate_drops_entry(self, clock):
        cache = BalanceSummaryCache(ttl_seconds=10, clock=clock)
        hostel_id = uuid4()
        cache.put(hostel_id, _summary(hostel_id))

        cache.invalidate(hostel_id)

        assert cache.get(hostel_id) is None

    def test_entries_are_per_hostel(self, clock):
        cache = BalanceSummaryCache(ttl_seconds=10, clock=clock)
        first, second = uuid4(), uuid4()
        cache.put(first, _summary(first))

        cache.invalidate(second)

        assert cache.get(first) is not None
        assert cache.get(second) is None

    def test_put_refused_after_invalidation(self, clock):
        cache = BalanceSummaryCache(ttl_seconds=10, clock=clock)
        hostel_id = uuid4()
        generation = cache.generation(hostel_id)

        cache.invalidate(hostel_id)

        assert cache.put(hostel_id, _summary(hostel_id), generation) is None
        assert cache.get(hostel_id) is None

    def test_superseded_entry_is_not_served(self, clock):
        backend = MemoryBackend()
        cache = BalanceSummaryCache(backend, ttl_seconds=10, clock=clock)
        hostel_id = uuid4()
        cache.put(hostel_id, _summary(hostel_id))

        # Generation moved on without the entry being deleted
        backend.incr(f"ledger:summary:{hostel_id}:generation")

        assert cache.get(hostel_id) is None
        assert len(backend) == 0

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError):
            BalanceSummaryCache(ttl_seconds=0)


class TestBalanceSummaryService:
    def test_repeated_reads_within_ttl_share_one_result(self, container, seeded, clock):
        first = container.summaries.get_summary(seeded.hostel_id)
        clock.advance(seconds=5)
        second = container.summaries.get_summary(seeded.hostel_id)

        assert first.metadata["cached"] is False
        assert second.metadata["cached"] is True
        assert second.data is first.data

    def test_recomputed_after_ttl(self, container, seeded, clock):
        first = container.summaries.get_summary(seeded.hostel_id).unwrap()
        clock.advance(seconds=11)
        second = container.summaries.get_summary(seeded.hostel_id)

        assert second.metadata["cached"] is False
        assert second.data.computed_at > first.computed_at

    def test_payment_invalidates_summary(self, container, seeded):
        container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()
        before = container.summaries.get_summary(seeded.hostel_id).unwrap()

        container.payments.record_payment(
            seeded.hostel_id, PaymentCreate(user_id=seeded.alice_id, amount=Decimal("250"))
        ).unwrap()
        after = container.summaries.get_summary(seeded.hostel_id)

        assert after.metadata["cached"] is False
        assert before.total_collected == Decimal("0")
        assert after.data.total_collected == Decimal("250")
        assert after.data.total_outstanding == Decimal("750")

    def test_payment_during_recompute_is_not_cached(self, container, seeded, monkeypatch):
        container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()
        compute = container.summaries._compute

        def compute_then_pay(hostel_id):
            summary = compute(hostel_id)
            container.payments.record_payment(
                seeded.hostel_id, PaymentCreate(user_id=seeded.alice_id, amount=Decimal("250"))
            ).unwrap()
            return summary

        monkeypatch.setattr(container.summaries, "_compute", compute_then_pay)
        racing = container.summaries.get_summary(seeded.hostel_id).unwrap()
        monkeypatch.undo()

        after = container.summaries.get_summary(seeded.hostel_id)

        assert racing.total_collected == Decimal("0")
        assert after.metadata["cached"] is False
        assert after.data.total_collected == Decimal("250")
        assert after.data.total_outstanding == Decimal("750")

    def test_registration_invalidates_summary(self, container, seeded):
        container.summaries.get_summary(seeded.hostel_id).unwrap()

        container.students.register_student(
            seeded.hostel_id, StudentCreate(email="gina@students.example.com", name="Gina")
        ).unwrap()
        after = container.summaries.get_summary(seeded.hostel_id)

        assert after.metadata["cached"] is False
        assert [s.name for s in after.data.students] == ["Alice Namuli", "Bob Okello", "Gina"]

    def test_summary_contents(self, container, seeded, clock):
        container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()
        container.assignments.assign(seeded.bob_id, seeded.room_103, seeded.hostel_id).unwrap()
        container.payments.record_payment(
            seeded.hostel_id, PaymentCreate(user_id=seeded.alice_id, amount=Decimal("400"))
        ).unwrap()
        clock.advance(seconds=1)
        container.payments.record_payment(
            seeded.hostel_id, PaymentCreate(user_id=seeded.bob_id, amount=Decimal("900"))
        ).unwrap()
        container.payments.record_payment(
            seeded.other_hostel_id, PaymentCreate(user_id=seeded.outsider_id, amount=Decimal("5000"))
        ).unwrap()

        summary = container.summaries.get_summary(seeded.hostel_id).unwrap()

        assert summary.total_collected == Decimal("1300")
        # Bob's 100 credit does not offset Alice's 600 due
        assert summary.total_outstanding == Decimal("600")
        alice, bob = summary.students
        assert (alice.name, alice.room_number, alice.balance) == ("Alice Namuli", "101", Decimal("600"))
        assert alice.access_number == "A1001"
        assert (bob.balance, bob.status.value) == (Decimal("-100"), "paid")
