"""Conversation session with rate-gated streaming replies.

Core module for turning user text into a sequence of ReplyEvents.

Architecture Decisions:

1. **Explicit active reply slot** - The reply being streamed lives in
   ``active_reply``, separate from the immutable ``history``. It is promoted
   to a completed Turn exactly once, on whichever terminal path the stream
   takes. History entries are never rewritten in place.

2. **Single flight** - ``submit_turn`` raises SessionBusyError while a
   previous event stream is still open instead of trusting the UI to disable
   its input.

3. **Failures become events** - Nothing raised by the model escapes the event
   iterator. Errors are classified and turned into a Failed event plus a
   user-facing assistant turn.

4. **Prompt cancellation** - The model stream is pumped by its own task into
   a one-slot queue. ``cancel()`` cancels that task and wakes the reader, so a
   stream stuck waiting for its first or next fragment stops at once. The
   model stream is closed and partial text kept.

5. **Turn ends at the terminal event** - The session is idle again as soon as
   the terminal event is handed out, even if the consumer never closes the
   iterator afterwards.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Protocol

from src.models.schemas import (
    ActiveReply,
    Cancelled,
    Delta,
    Failed,
    FailureKind,
    Rejected,
    ReplyEvent,
    Role,
    Turn,
)
from src.session.config import SessionConfig, get_session_config
from src.session.errors import (
    FAILURE_MESSAGES,
    EmptyTurnError,
    SessionBusyError,
    classify_failure,
)
from src.session.rate_gate import RateGate, get_rate_gate

logger = logging.getLogger(__name__)


class ReplyStream(Protocol):
    def stream_reply(self, prompt: str, history: Sequence[Turn]) -> AsyncIterator[str]:
        """Stream reply text fragments for a prompt given prior turns."""


async def _close_stream(stream: AsyncIterator[str]) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()


# Queue markers. Anything else in the queue is a fragment or an exception.
_STREAM_END = object()
_WAKE = object()


async def _pump(stream: AsyncIterator[str], fragments: asyncio.Queue) -> None:
    """Copy model fragments into the queue, then the end marker or the error."""
    try:
        async for fragment in stream:
            await fragments.put(fragment)
    except Exception as e:
        await fragments.put(e)
    else:
        await fragments.put(_STREAM_END)


@dataclass
class _Flight:
    """The one submission currently in progress."""

    cancel_requested: bool = False
    pump: asyncio.Task | None = None
    fragments: asyncio.Queue | None = None

    def cancel(self) -> None:
        self.cancel_requested = True
        if self.pump is not None:
            self.pump.cancel()
        # An empty queue means the reader may be parked on get()
        if self.fragments is not None and not self.fragments.full():
            self.fragments.put_nowait(_WAKE)


class ConversationSession:
    """One ongoing dialogue with the remote model.

    Owns the transcript and the in-progress reply. The rate gate is a shared
    collaborator consulted before every model request.
    """

    def __init__(
        self,
        model: ReplyStream,
        rate_gate: RateGate | None = None,
        config: SessionConfig | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            model: Streaming model capability.
            rate_gate: Gate to consult before each request.
                       Uses the process-wide gate if not provided.
            config: Optional session configuration.
                    Loads from environment if not provided.
        """
        self._model = model
        self._config = config or get_session_config()
        self._rate_gate = rate_gate or get_rate_gate()
        self._history: list[Turn] = []
        self._context_start = 0
        self._active_reply: ActiveReply | None = None
        self._flight: _Flight | None = None
        self._add_greeting()

    def _add_greeting(self) -> None:
        greeting = self._config.greeting.strip()
        if greeting:
            self._history.append(Turn(role=Role.ASSISTANT, text=greeting))
        # The greeting is shown to the user but never sent as model context
        self._context_start = len(self._history)

    @property
    def history(self) -> tuple[Turn, ...]:
        return tuple(self._history)

    @property
    def context(self) -> tuple[Turn, ...]:
        """Turns sent to the model as prior conversation."""
        return tuple(self._history[self._context_start :])

    @property
    def active_reply(self) -> ActiveReply | None:
        return self._active_reply

    @property
    def is_streaming(self) -> bool:
        return self._flight is not None

    @property
    def rate_gate(self) -> RateGate:
        return self._rate_gate

    def submit_turn(self, text: str) -> AsyncIterator[ReplyEvent]:
        """Submit a user turn and stream the reply as events.

        Validation is eager: nothing is recorded and the gate is not consulted
        when this raises.

        The session is free again once the terminal event has been yielded.
        A consumer that stops before that must close the iterator, for
        example with ``contextlib.aclosing``, or the session stays busy until
        the iterator is garbage collected.

        Args:
            text: The user's message.

        Returns:
            Finite async iterator of ReplyEvents ending in a terminal event.

        Raises:
            EmptyTurnError: If text is empty or whitespace only.
            SessionBusyError: If a previous reply is still streaming.
        """
        prompt = (text or "").strip()
        if not prompt:
            raise EmptyTurnError("Message must not be empty")
        if self._flight is not None:
            raise SessionBusyError("A reply is already streaming")
        return self._run_turn(prompt)

    def cancel(self) -> bool:
        """Request cancellation of the streaming reply.

        Returns:
            True if a reply was streaming. It stops right away, even while
            the model has not produced its next fragment yet.
        """
        if self._flight is None:
            return False
        logger.info("Cancellation requested for streaming reply")
        self._flight.cancel()
        return True

    def reset(self) -> None:
        """Start a fresh conversation, keeping only the greeting."""
        if self._flight is not None:
            raise SessionBusyError("Cannot reset while a reply is streaming")
        self._history.clear()
        self._active_reply = None
        self._add_greeting()

    async def _run_turn(self, prompt: str) -> AsyncGenerator[ReplyEvent]:
        # Two iterators may be created before either starts
        if self._flight is not None:
            raise SessionBusyError("A reply is already streaming")

        flight = _Flight()
        self._flight = flight
        try:
            context = self.context
            self._history.append(Turn(role=Role.USER, text=prompt))

            admission = self._rate_gate.try_acquire()
            if not admission.granted:
                retry_after = max(admission.retry_after or 0.0, 0.0)
                logger.info(f"Submission rejected by rate gate, retry after {retry_after:.1f}s")
                self._land(flight)
                yield Rejected(retry_after_seconds=retry_after)
                return

            events = self._stream_reply(prompt, context, flight)
            try:
                async for event in events:
                    yield event
            finally:
                await events.aclose()
        finally:
            self._land(flight)

    def _land(self, flight: _Flight) -> None:
        # A late finalizer must not clear a newer flight
        if self._flight is flight:
            self._flight = None

    async def _stream_reply(
        self,
        prompt: str,
        context: tuple[Turn, ...],
        flight: _Flight,
    ) -> AsyncGenerator[ReplyEvent]:
        reply = ActiveReply()
        self._active_reply = reply
        stream: AsyncIterator[str] | None = None
        fragments: asyncio.Queue = asyncio.Queue(maxsize=1)
        flight.fragments = fragments

        try:
            try:
                stream = self._model.stream_reply(prompt, context)
                flight.pump = asyncio.create_task(_pump(stream, fragments))
                while not flight.cancel_requested:
                    item = await fragments.get()
                    if flight.cancel_requested or item is _STREAM_END or item is _WAKE:
                        break
                    if isinstance(item, Exception):
                        raise item
                    if item:
                        yield Delta(text=reply.append(item))
            except Exception as e:
                kind = classify_failure(e)
                logger.error(f"Reply stream failed ({kind.value}): {e}")
                failed = self._fail(reply, kind)
                self._land(flight)
                yield failed
                return

            if flight.cancel_requested:
                self._promote(reply, keep_empty=False)
                logger.info(f"Reply cancelled after {len(reply.text)} characters")
                self._land(flight)
                yield Cancelled(partial_text=reply.text)
                return

            self._promote(reply, keep_empty=True)
            logger.debug(f"Reply completed with {len(reply.text)} characters")
            self._land(flight)
            yield Delta(text=reply.text, in_progress=False)
        finally:
            # Consumer stopped iterating mid-stream
            if self._active_reply is reply:
                self._promote(reply, keep_empty=False)
            if flight.pump is not None:
                if not flight.pump.done():
                    flight.pump.cancel()
                await asyncio.wait({flight.pump})
            if stream is not None:
                await _close_stream(stream)

    def _promote(self, reply: ActiveReply, keep_empty: bool) -> None:
        reply.in_progress = False
        if reply.text or keep_empty:
            self._history.append(reply.to_turn())
        self._active_reply = None

    def _fail(self, reply: ActiveReply, kind: FailureKind) -> Failed:
        self._promote(reply, keep_empty=False)
        message = FAILURE_MESSAGES[kind]
        self._history.append(Turn(role=Role.ASSISTANT, text=message))

        if kind is FailureKind.QUOTA_EXCEEDED:
            self._rate_gate.block_for(self._config.quota_cooldown_seconds)

        return Failed(kind=kind, message=message, partial_text=reply.text)
