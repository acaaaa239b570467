"""Client-side admission control for outbound model requests.

Two independent policies share one gate:

1. **Fixed window** - at most ``max_requests`` admissions per
   ``window_seconds``. The window starts at the first request and resets on
   the first request made after it has elapsed.
2. **Cooldown override** - ``block_for`` denies everything until a deadline,
   regardless of the window counters. Used after the model reports quota
   exhaustion.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from src.session.config import SessionConfig, get_session_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Admission:
    """Outcome of a single admission check.

    Attributes:
        granted: Whether the request may proceed.
        retry_after: Seconds until a retry could succeed (None when granted).
    """

    granted: bool
    retry_after: float | None = None


class RateGate:
    """Fixed-window rate gate with a cooldown override.

    All check-and-update operations hold one lock, so a gate can be shared
    between sessions running on different threads.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._request_count = 0
        self._window_start: float | None = None
        self._blocked_until: float | None = None

    @classmethod
    def from_config(
        cls,
        config: SessionConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> "RateGate":
        return cls(
            max_requests=config.max_requests,
            window_seconds=config.window_seconds,
            clock=clock,
        )

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @property
    def request_count(self) -> int:
        return self._request_count

    @property
    def window_start(self) -> float | None:
        return self._window_start

    @property
    def blocked_until(self) -> float | None:
        return self._blocked_until

    def try_acquire(self, now: float | None = None) -> Admission:
        """Admit or reject one request.

        Args:
            now: Current time on the gate's clock. Read from the clock if omitted.

        Returns:
            Admission with ``granted`` and, on denial, ``retry_after`` seconds.
        """
        with self._lock:
            if now is None:
                now = self._clock()

            if self._blocked_until is not None:
                if now < self._blocked_until:
                    return Admission(granted=False, retry_after=self._blocked_until - now)
                self._blocked_until = None

            if self._window_start is None or now - self._window_start >= self._window_seconds:
                self._window_start = now
                self._request_count = 0

            if self._request_count < self._max_requests:
                self._request_count += 1
                return Admission(granted=True)

            retry_after = (self._window_start + self._window_seconds) - now
            logger.debug(f"Rate gate denied request, retry in {retry_after:.1f}s")
            return Admission(granted=False, retry_after=retry_after)

    def block_for(self, seconds: float, now: float | None = None) -> None:
        """Deny all requests for ``seconds``, independent of the window.

        An active cooldown is only ever extended, never shortened.
        """
        with self._lock:
            if now is None:
                now = self._clock()
            deadline = now + seconds
            if self._blocked_until is None or deadline > self._blocked_until:
                self._blocked_until = deadline
                logger.warning(f"Rate gate blocked for {seconds:.0f}s")

    def reset(self) -> None:
        """Clear window counters and any cooldown."""
        with self._lock:
            self._request_count = 0
            self._window_start = None
            self._blocked_until = None


# Module-level shared gate
_rate_gate: RateGate | None = None


def get_rate_gate() -> RateGate:
    """Get or create the process-wide rate gate.

    Every session in the process shares this gate so the limit applies to
    the application as a whole.

    Returns:
        The shared RateGate instance.
    """
    global _rate_gate
    if _rate_gate is None:
        _rate_gate = RateGate.from_config(get_session_config())
    return _rate_gate
