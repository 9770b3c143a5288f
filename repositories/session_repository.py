"""
In-memory store of plans being configured.

Each plan belongs to exactly one session. Nothing here is persisted: a
session ends when it is checked out or abandoned, or when the process exits.

Every read-transition-write on a session runs under that session's lock
(see ``lock``). Checkout does not hold the lock while the gateway collects
payment; it claims the session instead, and a claimed session rejects both
a second checkout and further edits until the claim is released.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Iterator, Mapping, Optional

from app.exceptions import CheckoutInProgressError, NotFoundError
from domain.entities import Product
from services.subscription_service import SubscriptionPlan

logger = logging.getLogger("selkies.sessions")


@dataclass(frozen=True)
class PlanSession:
    session_id: uuid.UUID
    plan: SubscriptionPlan
    # catalog snapshot taken when the session opened; prices are not refreshed
    products: Mapping[int, Product] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    checkout_claimed: bool = False
    # set when payment was taken but the order could not be stored
    captured_reference: Optional[str] = None


class PlanSessionRepository:
    """Thread-safe map of session id to PlanSession."""

    def __init__(self):
        self._sessions: Dict[uuid.UUID, PlanSession] = {}
        self._session_locks: Dict[uuid.UUID, threading.Lock] = {}
        self._lock = threading.Lock()

    def open(self, plan: SubscriptionPlan, products: Mapping[int, Product]) -> PlanSession:
        session = PlanSession(session_id=uuid.uuid4(), plan=plan, products=dict(products))
        with self._lock:
            self._sessions[session.session_id] = session
            self._session_locks[session.session_id] = threading.Lock()
        logger.info("Opened plan session %s with %d products", session.session_id, len(products))
        return session

    def get(self, session_id: uuid.UUID) -> PlanSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError(f"Plan session {session_id} not found")
        return session

    def _session_lock(self, session_id: uuid.UUID) -> threading.Lock:
        with self._lock:
            lock = self._session_locks.get(session_id)
        if lock is None:
            raise NotFoundError(f"Plan session {session_id} not found")
        return lock

    @staticmethod
    def _reject_if_claimed(session: PlanSession) -> None:
        if session.captured_reference is not None:
            raise CheckoutInProgressError(
                "Payment was taken but the order was not recorded; please contact us",
                details={"payment_reference": session.captured_reference},
            )
        if session.checkout_claimed:
            raise CheckoutInProgressError()

    @contextmanager
    def lock(self, session_id: uuid.UUID) -> Iterator[PlanSession]:
        """
        Hold the session for one read-transition-write.

        Yields the current PlanSession; save_plan inside the block cannot be
        overwritten by a concurrent request on the same session.
        """
        with self._session_lock(session_id):
            session = self.get(session_id)
            self._reject_if_claimed(session)
            yield session

    def save_plan(self, session_id: uuid.UUID, plan: SubscriptionPlan) -> PlanSession:
        return self._update(session_id, plan=plan)

    def _update(self, session_id: uuid.UUID, **changes) -> PlanSession:
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                raise NotFoundError(f"Plan session {session_id} not found")
            updated = replace(current, **changes)
            self._sessions[session_id] = updated
        return updated

    def claim_checkout(self, session_id: uuid.UUID) -> PlanSession:
        """Mark the session as checking out; a second claim raises CheckoutInProgressError."""
        with self._session_lock(session_id):
            with self._lock:
                current = self._sessions.get(session_id)
                if current is None:
                    raise NotFoundError(f"Plan session {session_id} not found")
                self._reject_if_claimed(current)
                claimed = replace(current, checkout_claimed=True)
                self._sessions[session_id] = claimed
        logger.info("Checkout claimed for plan session %s", session_id)
        return claimed

    def release_checkout(self, session_id: uuid.UUID) -> None:
        """Give the session back for edits and another checkout attempt."""
        with self._lock:
            current = self._sessions.get(session_id)
            if current is not None:
                self._sessions[session_id] = replace(current, checkout_claimed=False)

    def mark_payment_captured(self, session_id: uuid.UUID, reference: str) -> PlanSession:
        """Keep the claim for good: the customer has paid and must not be charged again."""
        logger.error("Plan session %s holds unrecorded payment %s", session_id, reference)
        return self._update(session_id, checkout_claimed=True, captured_reference=reference)

    def discard(self, session_id: uuid.UUID) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
            self._session_locks.pop(session_id, None)
        if removed is not None:
            logger.info("Discarded plan session %s", session_id)
        return removed is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
