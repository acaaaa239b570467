"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - clock: Manually advanced clock for rate gate timing
    - rate_gate: RateGate bound to the fake clock
    - session_config: SessionConfig without a greeting
    - make_model: Factory for scripted fake models
    - session: ConversationSession wired to a scripted model
"""

from collections.abc import AsyncGenerator, Callable, Sequence

import pytest

from src.models.schemas import Turn
from src.session.config import SessionConfig
from src.session.conversation import ConversationSession
from src.session.rate_gate import RateGate


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedModel:
    """Fake model capability yielding preset fragments.

    Attributes:
        fragments: Fragments to yield, in order.
        error: Exception raised after all fragments are yielded.
        calls: (prompt, history) of every stream_reply call.
        closed: Whether the last stream was closed before finishing.
    """

    def __init__(
        self,
        fragments: Sequence[str] = (),
        error: BaseException | None = None,
    ) -> None:
        self.fragments = list(fragments)
        self.error = error
        self.calls: list[tuple[str, tuple[Turn, ...]]] = []
        self.closed = False

    async def stream_reply(
        self,
        prompt: str,
        history: Sequence[Turn],
    ) -> AsyncGenerator[str]:
        self.calls.append((prompt, tuple(history)))
        finished = False
        try:
            for fragment in self.fragments:
                yield fragment
            if self.error is not None:
                raise self.error
            finished = True
        finally:
            if not finished and self.error is None:
                self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_gate(clock: FakeClock) -> RateGate:
    """Return a gate admitting 10 requests per 60 seconds on the fake clock."""
    return RateGate(max_requests=10, window_seconds=60.0, clock=clock)


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(
        max_requests=10,
        window_seconds=60.0,
        quota_cooldown_seconds=300.0,
        greeting="",
    )


@pytest.fixture
def make_model() -> Callable[..., ScriptedModel]:
    return ScriptedModel


@pytest.fixture
def session(
    rate_gate: RateGate,
    session_config: SessionConfig,
) -> Callable[[ScriptedModel], ConversationSession]:
    """Return a factory building sessions around a scripted model."""

    def build(model: ScriptedModel) -> ConversationSession:
        return ConversationSession(model, rate_gate=rate_gate, config=session_config)

    return build
