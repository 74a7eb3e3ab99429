"""Database initialization utilities."""
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from hostel_ledger.db.base import Base, import_models

logger = logging.getLogger(__name__)


def init_db(engine: Engine, session_factory: sessionmaker, seed_plans: bool = True) -> None:
    """
    Create all tables and seed the default subscription plans.

    Note: This is suitable for development/testing only.
    For production, use migrations instead.
    """
    from hostel_ledger.services.subscription.plan_service import PlanService

    try:
        import_models()
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise

    if seed_plans:
        result = PlanService(session_factory).seed_default_plans()
        if not result.is_success:
            logger.error(
                "Failed to seed default subscription plans",
                extra={"error": result.error.to_dict() if result.error else None},
            )

