"""Minimal in-process metrics recorder (not suitable for multi-process aggregation)."""

from __future__ import annotations

from collections import Counter, OrderedDict
from threading import Lock
from typing import Dict

MAX_RECENT_DURATIONS = 100


class MetricsRecorder:
    def __init__(self) -> None:
        self._lock = Lock()
        self._requests = 0
        self._request_durations_ms: OrderedDict[str, float] = OrderedDict()
        self._sessions_opened = 0
        self._sessions_closed = 0
        self._tool_success: Counter[str] = Counter()
        self._tool_error: Counter[str] = Counter()
        self._unknown_tool = 0

    def incr_request(self) -> None:
        with self._lock:
            self._requests += 1

    def record_duration(self, request_id: str, duration_ms: float) -> None:
        with self._lock:
            self._request_durations_ms[request_id] = duration_ms
            while len(self._request_durations_ms) > MAX_RECENT_DURATIONS:
                self._request_durations_ms.popitem(last=False)

    def record_session_opened(self) -> None:
        with self._lock:
            self._sessions_opened += 1

    def record_session_closed(self) -> None:
        with self._lock:
            self._sessions_closed += 1

    def record_tool(self, tool: str, *, success: bool) -> None:
        with self._lock:
            if success:
                self._tool_success[tool] += 1
            else:
                self._tool_error[tool] += 1

    def record_unknown_tool(self) -> None:
        # Caller-supplied names are not used as keys.
        with self._lock:
            self._unknown_tool += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests": self._requests,
                "sessions_opened": self._sessions_opened,
                "sessions_closed": self._sessions_closed,
                "tool_success": dict(self._tool_success),
                "tool_error": dict(self._tool_error),
                "unknown_tool": self._unknown_tool,
                "recent_request_durations_ms": dict(self._request_durations_ms),
            }

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._request_durations_ms.clear()
            self._sessions_opened = 0
            self._sessions_closed = 0
            self._tool_success.clear()
            self._tool_error.clear()
            self._unknown_tool = 0


default_metrics = MetricsRecorder()
