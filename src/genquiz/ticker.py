import asyncio
import logging
from typing import Optional

from .engine import QuizSessionEngine
from .models import Phase

logger = logging.getLogger(__name__)


class SessionTicker:
    """Drives an engine's per-question countup from an asyncio task.

    Calls ``tick()`` once per interval while the engine is Active and exits on
    its own once the phase changes.
    """

    def __init__(self, engine: QuizSessionEngine, interval: float = 1.0, session_id: str = ""):
        self._engine = engine
        self._interval = interval
        self._session_id = session_id
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Schedule the tick loop on the running event loop."""
        if self.is_running:
            return self._task
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Ticker started for session {self._session_id}")
        return self._task

    def cancel(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            logger.debug(f"Ticker cancelled for session {self._session_id}")

    async def _run(self) -> None:
        try:
            while self._engine.phase == Phase.ACTIVE:
                await asyncio.sleep(self._interval)
                self._engine.tick()
        except Exception as e:
            logger.error(f"Ticker for session {self._session_id} failed: {e}")
            raise
        logger.debug(
            f"Ticker stopped for session {self._session_id} (phase: {self._engine.phase.value})"
        )
