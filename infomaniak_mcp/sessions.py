"""Session bookkeeping for the HTTP transport."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from infomaniak_mcp.metrics import MetricsRecorder, default_metrics
from infomaniak_mcp.protocol import McpChannel

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[str], McpChannel]


def new_session_id() -> str:
    """Return a random (uuid4, os.urandom backed) session identifier."""
    return str(uuid.uuid4())


@dataclass(slots=True)
class Session:
    session_id: str
    channel: McpChannel
    created_at: float = field(default_factory=time.time)


class SessionRegistry:
    """
    Owned map of session identifier to ``Session``.

    Mutations run under an ``asyncio.Lock`` so that interleaved tasks never
    observe a half-registered or half-removed session. Lookups are plain dict
    reads.
    """

    def __init__(self, *, metrics: MetricsRecorder = default_metrics) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = asyncio.Lock()
        self._metrics = metrics

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def ids(self) -> List[str]:
        return list(self._sessions)

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    async def create(self, channel_factory: ChannelFactory) -> Session:
        async with self._lock:
            session_id = new_session_id()
            while session_id in self._sessions:
                session_id = new_session_id()
            session = Session(session_id=session_id, channel=channel_factory(session_id))
            self._sessions[session_id] = session
        self._metrics.record_session_opened()
        logger.info("session opened session_id=%s", session_id, extra={"session_id": session_id})
        return session

    async def remove(self, session_id: str) -> bool:
        """Close and forget ``session_id``; returns False when it was not registered."""
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.channel.close()
        self._metrics.record_session_closed()
        logger.info("session closed session_id=%s", session_id, extra={"session_id": session_id})
        return True

    async def close_all(self) -> int:
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.channel.close()
            self._metrics.record_session_closed()
        if sessions:
            logger.info("closed %d session(s)", len(sessions))
        return len(sessions)
