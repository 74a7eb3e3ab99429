import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
import redis
from pydantic import ValidationError
from sqlalchemy import create_engine, select
from sqlalchemy.pool import StaticPool

from hostel_ledger.config.logging import CustomJsonFormatter, build_logging_config
from hostel_ledger.config.settings import Settings
from hostel_ledger.core.cache import MemoryBackend, RedisBackend
from hostel_ledger.core.container import build_cache_backend
from hostel_ledger.core.pagination import normalize_pagination, page_offset
from hostel_ledger.db.init_db import init_db
from hostel_ledger.db.session import make_session_factory
from hostel_ledger.models.subscription.subscription_plan import SubscriptionPlan
from hostel_ledger.schemas.payment.payment import HostelPaymentSummary
from hostel_ledger.services.communication.email_service import (
    LoggingEmailSender,
    SmtpEmailSender,
    build_email_sender,
)
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache
from hostel_ledger.utils.date_utils import add_months


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.expiries = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value):
        self.store[key] = value

    def setex(self, key, seconds, value):
        self.store[key] = value
        self.expiries[key] = seconds

    def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0

    def incr(self, key):
        value = int(self.store.get(key, b"0")) + 1
        self.store[key] = str(value).encode()
        return value

    def close(self):
        pass


class BrokenRedis(FakeRedis):
    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def incr(self, key):
        raise redis.ConnectionError("connection refused")

    def setex(self, key, seconds, value):
        raise redis.ConnectionError("connection refused")


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.DEFAULT_CURRENCY == "UGX"
        assert settings.SUMMARY_CACHE_TTL_SECONDS == 10
        assert settings.SUBSCRIPTION_WARNING_DAYS == 30

    def test_database_url_from_parts(self):
        settings = Settings(DATABASE_URL=None, DB_HOST="db", DB_PORT=5433, DB_USER="u", DB_PASSWORD="p", DB_NAME="ledger")
        assert settings.get_database_url() == "postgresql://u:p@db:5433/ledger"

    def test_unknown_cache_backend(self):
        with pytest.raises(ValidationError):
            Settings(CACHE_BACKEND="memcached")

    def test_non_positive_ttl(self):
        with pytest.raises(ValidationError):
            Settings(SUMMARY_CACHE_TTL_SECONDS=0)

    def test_currency_is_normalized(self):
        assert Settings(CURRENCY=" kes ").DEFAULT_CURRENCY == "KES"


class TestLoggingConfig:
    def test_console_only_by_default(self):
        config = build_logging_config(Settings(LOG_FILE=None, ENVIRONMENT="development"))

        assert list(config["handlers"]) == ["console"]
        assert config["handlers"]["console"]["formatter"] == "colored"

    def test_json_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "ledger.log"
        config = build_logging_config(Settings(LOG_FILE=str(log_file), LOG_FORMAT="json"))

        assert config["handlers"]["json_file"]["filename"] == str(log_file)
        assert config["handlers"]["console"]["formatter"] == "json"
        assert log_file.parent.is_dir()

    def test_json_formatter_gets_environment_from_settings(self):
        config = build_logging_config(Settings(LOG_FORMAT="json", ENVIRONMENT="production"))

        assert config["formatters"]["json"]["environment"] == "production"

    def test_json_records_carry_environment(self):
        formatter = CustomJsonFormatter("%(message)s", environment="testing")
        record = logging.LogRecord("hostel_ledger.test", logging.INFO, __file__, 1, "hello", None, None)
        record.request_id = "req-1"

        payload = json.loads(formatter.format(record))

        assert payload["environment"] == "testing"
        assert payload["request_id"] == "req-1"
        assert payload["level"] == "INFO"


class TestCacheBackends:
    def test_memory_backend(self):
        backend = MemoryBackend()
        backend.set("k", {"a": 1})

        assert backend.get("k") == {"a": 1}
        assert backend.delete("k") is True
        assert backend.delete("k") is False
        assert backend.get_counter("g") == 0
        assert backend.incr("g") == 1
        assert backend.get_counter("g") == 1

    def test_summary_cache_over_redis(self, clock):
        client = FakeRedis()
        cache = BalanceSummaryCache(RedisBackend(client), ttl_seconds=10, clock=clock)
        hostel_id = uuid4()
        summary = HostelPaymentSummary(
            hostel_id=hostel_id,
            total_collected=Decimal("100"),
            total_outstanding=Decimal("0"),
            computed_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )

        cache.put(hostel_id, summary)

        assert client.expiries[f"ledger:summary:{hostel_id}"] == 11
        assert cache.get(hostel_id) == summary
        clock.advance(seconds=10)
        assert cache.get(hostel_id) is None
        assert client.store == {}

    def test_redis_errors_degrade_to_miss(self):
        backend = RedisBackend(BrokenRedis())

        assert backend.get("k") is None
        assert backend.set("k", 1, expire=5) is False
        assert backend.get_counter("k") is None
        assert backend.incr("k") is None

    def test_summary_cache_over_unreachable_redis(self, clock):
        cache = BalanceSummaryCache(RedisBackend(BrokenRedis()), ttl_seconds=10, clock=clock)
        hostel_id = uuid4()
        summary = HostelPaymentSummary(
            hostel_id=hostel_id,
            total_collected=Decimal("0"),
            total_outstanding=Decimal("0"),
            computed_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )

        assert cache.put(hostel_id, summary) is None
        assert cache.get(hostel_id) is None
        cache.invalidate(hostel_id)

    @pytest.mark.parametrize(
        "payload",
        [b"not a pickle", b"cbuiltins\nno_such_name\n.", b"cno_such_module_for_ledger\nSummary\n."],
    )
    def test_unreadable_redis_entry_is_a_miss(self, payload):
        client = FakeRedis()
        client.set("k", payload)
        backend = RedisBackend(client)

        assert backend.get("k") is None
        assert "k" not in client.store

    def test_redis_generation_counter(self):
        client = FakeRedis()
        backend = RedisBackend(client)

        assert backend.get_counter("g") == 0
        assert backend.incr("g") == 1
        assert backend.incr("g") == 2
        assert backend.get_counter("g") == 2

    def test_backend_selection(self):
        assert isinstance(build_cache_backend(Settings(CACHE_BACKEND="memory")), MemoryBackend)
        assert isinstance(build_cache_backend(Settings(CACHE_BACKEND="redis")), RedisBackend)


def test_email_sender_selection():
    assert isinstance(build_email_sender(Settings(SMTP_HOST=None)), LoggingEmailSender)
    assert isinstance(build_email_sender(Settings(SMTP_HOST="smtp.example.com")), SmtpEmailSender)


@pytest.mark.parametrize(
    "page, page_size, expected",
    [(None, None, (1, 20)), (0, 500, (1, 100)), (3, 10, (3, 10))],
)
def test_normalize_pagination(page, page_size, expected):
    assert normalize_pagination(page, page_size) == expected


def test_page_offset():
    assert page_offset(3, 10) == 20


def test_add_months_clamps_month_end():
    assert add_months(datetime(2025, 1, 31, tzinfo=timezone.utc), 1) == datetime(2025, 2, 28, tzinfo=timezone.utc)


def test_init_db_creates_schema_and_seeds_plans_once():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    session_factory = make_session_factory(engine)

    init_db(engine, session_factory)
    init_db(engine, session_factory)

    session = session_factory()
    try:
        names = session.execute(select(SubscriptionPlan.name).order_by(SubscriptionPlan.duration_months)).scalars().all()
    finally:
        session.close()
        engine.dispose()
    assert names == ["Semester", "Half Year", "Full Year"]
