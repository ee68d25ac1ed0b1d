import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional

from .engine import QuizSessionEngine
from .ticker import SessionTicker

logger = logging.getLogger(__name__)


@dataclass
class QuizSession:
    session_id: str
    engine: QuizSessionEngine = field(default_factory=QuizSessionEngine)
    created_at: datetime = field(default_factory=datetime.now)
    topic: Optional[str] = None
    ticker: Optional[SessionTicker] = None
    # Bumped by every start request; a fetch that finishes under an older value is stale
    load_generation: int = 0

    def stop_ticker(self) -> None:
        if self.ticker:
            self.ticker.cancel()
            self.ticker = None


class SessionStore:
    """In-memory map from session cookie to quiz session, with expiry."""

    def __init__(self, timeout_minutes: int = 120):
        self.timeout = timedelta(minutes=timeout_minutes)
        self._sessions: Dict[str, QuizSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> QuizSession:
        self.purge_expired()
        session = QuizSession(session_id=str(uuid.uuid4()))
        self._sessions[session.session_id] = session
        return session

    def is_expired(self, session: QuizSession) -> bool:
        return datetime.now() - session.created_at > self.timeout

    def purge_expired(self) -> int:
        """Deletes every expired session, stopping its ticker. Returns the count."""
        expired = [s.session_id for s in self._sessions.values() if self.is_expired(s)]
        for session_id in expired:
            self.delete(session_id)
        if expired:
            logger.info(f"Purged {len(expired)} expired sessions")
        return len(expired)

    def get(self, session_id: Optional[str]) -> Optional[QuizSession]:
        if not session_id or session_id not in self._sessions:
            return None
        session = self._sessions[session_id]
        if self.is_expired(session):
            logger.info(f"Session expired: {session_id}")
            self.delete(session_id)
            return None
        return session

    def delete(self, session_id: Optional[str]) -> bool:
        session = self._sessions.pop(session_id, None) if session_id else None
        if session is None:
            return False
        session.stop_ticker()
        session.engine.restart()
        return True

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.delete(session_id)


async def sweep_expired(store: SessionStore, interval: float) -> None:
    """Purges expired sessions every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        store.purge_expired()
