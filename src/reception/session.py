"""Lifecycle of a single phone call bridged to the realtime engine.

State machine (terminal states are final)::

    INIT -> STREAM_OPENED -> ENGINE_CONNECTED -> STREAMING -> CLOSED
                                   \\-> CONNECT_FAILED

A call cancelled before it reaches STREAMING moves straight to CLOSED.

The event-consumption task is started before the engine handshake so that no
history event emitted during connection is lost. When the carrier stream ends the
transcript is mailed to the firm exactly once, and only if something was recorded.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from engine.base import BaseReasoningEngine, EngineSession
from reception.notifications import transcript_email
from reception.tool_handlers import Notifier
from reception.transcript import TranscriptAccumulator

LOGGER = logging.getLogger(__name__)

HANDOFF_MARKER = "System: conversation handed off to a human agent"


class CallState(str, enum.Enum):
    INIT = "init"
    STREAM_OPENED = "stream_opened"
    ENGINE_CONNECTED = "engine_connected"
    STREAMING = "streaming"
    CLOSED = "closed"
    CONNECT_FAILED = "connect_failed"


_TRANSITIONS: dict[CallState, frozenset[CallState]] = {
    CallState.INIT: frozenset({CallState.STREAM_OPENED, CallState.CONNECT_FAILED}),
    CallState.STREAM_OPENED: frozenset(
        {CallState.ENGINE_CONNECTED, CallState.CONNECT_FAILED, CallState.CLOSED}
    ),
    CallState.ENGINE_CONNECTED: frozenset(
        {CallState.STREAMING, CallState.CONNECT_FAILED, CallState.CLOSED}
    ),
    CallState.STREAMING: frozenset({CallState.CLOSED}),
    CallState.CLOSED: frozenset(),
    CallState.CONNECT_FAILED: frozenset(),
}


class MediaTransport(Protocol):
    call_id: str

    async def pump_inbound(self, on_audio: Callable[[bytes], Awaitable[None]]) -> None: ...

    async def send_audio(self, audio: bytes) -> None: ...

    async def clear(self) -> None: ...

    async def close(self) -> None: ...


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def role_label(item: Any) -> str:
    return str(_field(item, "role") or _field(item, "type") or "")


def extract_text(item: Any) -> str:
    """Join the item's text fragments; fall back to its transcript.

    Empty or missing fragments are skipped. Items whose audio fragments carry
    the only transcript (realtime audio turns) fall back to those transcripts.
    """

    content = _field(item, "content")
    fragments = content if isinstance(content, (list, tuple)) else []

    texts = [text for text in (_fragment_text(fragment) for fragment in fragments) if text]
    if texts:
        return " ".join(texts)

    transcript = _field(item, "transcript")
    if transcript:
        return str(transcript)

    transcripts = [str(t) for t in (_field(fragment, "transcript") for fragment in fragments) if t]
    return " ".join(transcripts)


def _fragment_text(fragment: Any) -> str | None:
    if fragment is None:
        return None
    if isinstance(fragment, str):
        return fragment
    text = _field(fragment, "text")
    return str(text) if text else None


def history_line(item: Any) -> str | None:
    """Transcript line for a history item, or None when it carries no text."""

    text = extract_text(item)
    if not text:
        return None
    return f"{role_label(item)}: {text}"


class CallSession:
    """Owns one call: carrier transport, engine session and transcript."""

    def __init__(
        self,
        transport: MediaTransport,
        engine: BaseReasoningEngine,
        notifier: Notifier,
        *,
        transcript_recipient: str | None,
    ) -> None:
        self._transport = transport
        self._engine = engine
        self._notifier = notifier
        self._transcript_recipient = transcript_recipient
        self.transcript = TranscriptAccumulator()
        self._state = CallState.INIT
        self._flushed = False

    @property
    def state(self) -> CallState:
        return self._state

    def _transition(self, new_state: CallState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Illegal call state transition {self._state.value} -> {new_state.value}")
        LOGGER.info("Call %s: %s -> %s", self._transport.call_id, self._state.value, new_state.value)
        self._state = new_state

    async def run(self) -> CallState:
        """Drive the call until the carrier stream closes or the engine cannot connect.

        Cancellation at any point still tears the call down and mails a non-empty
        transcript before the ``CancelledError`` propagates.
        """

        self._transition(CallState.STREAM_OPENED)

        engine_session: EngineSession | None = None
        consumer: asyncio.Task | None = None
        try:
            try:
                engine_session = await self._engine.create_session()
                consumer = asyncio.create_task(self._consume(engine_session))
                self._transition(CallState.ENGINE_CONNECTED)
                await engine_session.connect()
            except Exception:
                LOGGER.exception("Realtime connection error for call %s", self._transport.call_id)
                self._transition(CallState.CONNECT_FAILED)
                return self._state

            self._transition(CallState.STREAMING)
            await self._stream(engine_session, consumer)
        finally:
            await _cancel(consumer)
            await _close_engine(engine_session)
            if self._state is not CallState.CONNECT_FAILED:
                self._transition(CallState.CLOSED)
                await self.flush_transcript()
            await self._transport.close()
        return self._state

    async def _stream(self, engine_session: EngineSession, consumer: asyncio.Task) -> None:
        pump = asyncio.create_task(self._transport.pump_inbound(engine_session.send_audio))
        try:
            done, _ = await asyncio.wait({pump, consumer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not pump.done():
                await self._transport.close()
            await _cancel(pump)

        if consumer in done:
            self._report_consumer_exit(consumer)
        elif pump.exception() is not None:
            LOGGER.error(
                "Carrier stream for call %s failed",
                self._transport.call_id,
                exc_info=pump.exception(),
            )

    def _report_consumer_exit(self, consumer: asyncio.Task) -> None:
        if consumer.cancelled():
            return
        exc = consumer.exception()
        if exc is not None:
            LOGGER.error(
                "Event consumption failed for call %s; abandoning session",
                self._transport.call_id,
                exc_info=exc,
            )
        else:
            LOGGER.info("Realtime engine ended the event stream for call %s", self._transport.call_id)

    async def _consume(self, events: EngineSession) -> None:
        async for event in events:
            await self.handle_event(event)

    async def handle_event(self, event: Any) -> None:
        event_type = _field(event, "type")
        if event_type == "history_added":
            line = history_line(_field(event, "item"))
            if line:
                self.transcript.add(line)
        elif event_type == "handoff":
            self.transcript.add(HANDOFF_MARKER)
        elif event_type == "audio":
            audio = _field(_field(event, "audio"), "data")
            if audio:
                await self._transport.send_audio(audio)
        elif event_type == "audio_interrupted":
            await self._transport.clear()
        elif event_type == "error":
            LOGGER.warning("Realtime engine error on call %s: %s", self._transport.call_id, _field(event, "error"))

    async def flush_transcript(self) -> bool:
        """Mail the transcript once; returns True if an attempt was made."""

        if self._flushed:
            return False
        self._flushed = True
        if self.transcript.is_empty():
            return False

        email = transcript_email(self.transcript.get())
        try:
            await self._notifier.send(to=self._transcript_recipient, subject=email.subject, body=email.body)
        except Exception:
            LOGGER.exception("Error sending transcript email for call %s", self._transport.call_id)
        return True


async def _cancel(task: asyncio.Task | None) -> None:
    """Cancel ``task`` and wait for it; cancellation of the caller still propagates."""

    if task is None or task.done():
        return
    task.cancel()
    await asyncio.wait({task})
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        LOGGER.error("Task failed while being cancelled", exc_info=exc)


async def _close_engine(engine_session: EngineSession | None) -> None:
    if engine_session is None:
        return
    try:
        await engine_session.close()
    except Exception:
        LOGGER.exception("Closing realtime session failed")
