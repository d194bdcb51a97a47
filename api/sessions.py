"""In-memory registry of browser sessions. Nothing is persisted."""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable

from mockup_studio.config import StudioConfig
from mockup_studio.pipeline import FlowController
from mockup_studio.services import SessionKeyProvider


logger = logging.getLogger(__name__)


@dataclass
class StudioSession:
    session_id: str
    flow: FlowController
    credentials: SessionKeyProvider
    last_access: float = field(default_factory=time.monotonic)


class SessionRegistry:
    """Creates and looks up sessions; a restart loses them all.

    Sessions idle for longer than ``sessions.idle_ttl`` are evicted, and the
    least recently used ones go first once ``sessions.max_sessions`` is hit.
    Eviction runs when a session is created.
    """

    def __init__(self, gateway, config: StudioConfig, clock: Callable[[], float] = time.monotonic):
        self.gateway = gateway
        self.config = config
        self.clock = clock
        self._sessions: dict[str, StudioSession] = {}

    def create(self) -> StudioSession:
        self._evict()
        session_id = uuid.uuid4().hex
        credentials = SessionKeyProvider(fallback_key=self.config.api_key)
        session = StudioSession(
            session_id=session_id,
            flow=FlowController(self.gateway, credentials, self.config),
            credentials=credentials,
            last_access=self.clock(),
        )
        self._sessions[session_id] = session
        logger.info("Session %s created", session_id)
        return session

    def get(self, session_id: str) -> StudioSession:
        """Raises KeyError for unknown sessions."""
        session = self._sessions[session_id]
        session.last_access = self.clock()
        return session

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info("Session %s discarded", session_id)

    def _evict(self) -> None:
        limits = self.config.sessions
        cutoff = self.clock() - limits.idle_ttl
        for session_id in [s.session_id for s in self._sessions.values() if s.last_access < cutoff]:
            del self._sessions[session_id]
            logger.info("Session %s evicted after idling", session_id)

        # Leave room for the session about to be created
        overflow = len(self._sessions) - max(limits.max_sessions - 1, 0)
        if overflow > 0:
            oldest = sorted(self._sessions.values(), key=lambda s: s.last_access)[:overflow]
            for session in oldest:
                del self._sessions[session.session_id]
                logger.info("Session %s evicted, registry full", session.session_id)

    def __len__(self) -> int:
        return len(self._sessions)
