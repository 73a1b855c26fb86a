"""Request gates placed in front of the completion service.

Gates are plain objects handed to the advisor; nothing here is a
module-level singleton, so each caller decides how state is shared.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Protocol

Clock = Callable[[], float]


class RequestGate(Protocol):
    def may_proceed(self, key: str) -> bool:
        ...

    def record(self, key: str) -> None:
        ...


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Fixed-window request budget per key."""

    def __init__(self, max_requests: int, window_seconds: float, clock: Clock = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}

    def _active(self, key: str) -> _Window | None:
        window = self._windows.get(key)
        if window is None or self._clock() >= window.reset_at:
            return None
        return window

    def may_proceed(self, key: str) -> bool:
        window = self._active(key)
        return window is None or window.count < self.max_requests

    def record(self, key: str) -> None:
        window = self._active(key)
        if window is None:
            self._windows[key] = _Window(count=1, reset_at=self._clock() + self.window_seconds)
        else:
            window.count += 1

    def remaining(self, key: str) -> int:
        window = self._active(key)
        if window is None:
            return self.max_requests
        return max(0, self.max_requests - window.count)

    def reset_at(self, key: str) -> float:
        """Clock time at which the key's window resets; 0 when no window is open."""
        window = self._active(key)
        return window.reset_at if window else 0.0

    def cleanup(self) -> None:
        now = self._clock()
        for key in [k for k, w in self._windows.items() if now >= w.reset_at]:
            del self._windows[key]


class RequestMonitor:
    """Sliding one-minute cap on outbound requests across all keys."""

    WINDOW_SECONDS = 60.0

    def __init__(self, max_requests_per_minute: int = 30, clock: Clock = time.monotonic):
        self.max_requests_per_minute = max_requests_per_minute
        self._clock = clock
        self._timestamps: Deque[float] = deque()
        self.request_count = 0

    def _prune(self) -> None:
        cutoff = self._clock() - self.WINDOW_SECONDS
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()

    def may_proceed(self, key: str) -> bool:
        self._prune()
        return len(self._timestamps) < self.max_requests_per_minute

    def record(self, key: str) -> None:
        self.request_count += 1
        self._timestamps.append(self._clock())

    def status(self) -> Dict[str, int]:
        self._prune()
        return {
            "request_count": self.request_count,
            "recent_requests": len(self._timestamps),
            "limit_per_minute": self.max_requests_per_minute,
        }


class GateChain:
    """Proceed only when every gate agrees; record on all of them."""

    def __init__(self, *gates: RequestGate):
        self.gates = gates

    def may_proceed(self, key: str) -> bool:
        return all(gate.may_proceed(key) for gate in self.gates)

    def record(self, key: str) -> None:
        for gate in self.gates:
            gate.record(key)
