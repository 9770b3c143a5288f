"""
API dependencies for dependency injection
"""

from typing import Generator
from sqlalchemy.orm import Session

from adapters.payment_gateway import PaymentGateway, get_gateway
from domain.models import get_db_session
from repositories.session_repository import PlanSessionRepository

_plan_sessions = PlanSessionRepository()


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


def get_plan_sessions() -> PlanSessionRepository:
    """Process-wide store of plans being configured"""
    return _plan_sessions


def get_payment_gateway() -> PaymentGateway:
    return get_gateway()
