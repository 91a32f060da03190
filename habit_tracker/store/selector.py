"""Session identity and record store selection."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..config import Settings
from .base import RecordStore
from .demo import DemoStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """The account a request acts for."""

    owner_id: str
    email: Optional[str] = None


def is_demo_session(session: Session, settings: Settings) -> bool:
    """True when the session belongs to the demo account."""
    if not session.email or not settings.demo_email:
        return False
    return session.email.strip().lower() == settings.demo_email.strip().lower()


def select_store(
    session: Session, settings: Settings, live: RecordStore, today: date
) -> RecordStore:
    """
    Pick the record store for a session.

    Demo sessions get a read-only fixture store anchored at `today`;
    everyone else gets the live store.
    """
    if is_demo_session(session, settings):
        logger.debug(f"Serving demo data to {session.owner_id}")
        return DemoStore(today)
    return live
