"""Twilio Media Streams transport.

Twilio sends JSON frames over the WebSocket: ``connected``, ``start`` (carries the
stream sid), ``media`` (base64 G.711 mu-law audio), ``mark`` and finally ``stop``.
Audio goes back as ``media`` frames addressed to the stream sid; ``clear`` flushes
audio Twilio has buffered but not yet played.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

LOGGER = logging.getLogger(__name__)

AudioSink = Callable[[bytes], Awaitable[None]]


def parse_twilio_ws_message(text: str) -> dict[str, Any]:
    return json.loads(text)


def media_frame(stream_sid: str, audio: bytes) -> str:
    return json.dumps(
        {
            "event": "media",
            "streamSid": stream_sid,
            "media": {"payload": base64.b64encode(audio).decode("ascii")},
        }
    )


def clear_frame(stream_sid: str) -> str:
    return json.dumps({"event": "clear", "streamSid": stream_sid})


class TwilioMediaTransport:
    """Carrier side of one call: an accepted Twilio media-stream WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self.stream_sid: str | None = None
        self.call_sid: str | None = None
        self._stopped = False
        self._closed = False

    @property
    def call_id(self) -> str:
        return self.call_sid or self.stream_sid or "unknown"

    async def pump_inbound(self, on_audio: AudioSink) -> None:
        """Forward caller audio to ``on_audio`` until the carrier closes the stream."""

        try:
            while not self._stopped:
                message = parse_twilio_ws_message(await self._websocket.receive_text())
                await self._handle_message(message, on_audio)
        except WebSocketDisconnect:
            self._closed = True
        finally:
            self._stopped = True
        LOGGER.info("Twilio media stream %s closed", self.call_id)

    async def _handle_message(self, message: dict[str, Any], on_audio: AudioSink) -> None:
        event = str(message.get("event") or "")
        if event == "media":
            media = message.get("media") or {}
            if media.get("track") and media.get("track") != "inbound":
                return
            payload = media.get("payload")
            if isinstance(payload, str) and payload:
                await on_audio(base64.b64decode(payload))
        elif event == "start":
            start = message.get("start") or {}
            self.stream_sid = start.get("streamSid") or message.get("streamSid")
            self.call_sid = start.get("callSid")
            LOGGER.info("Twilio media stream started: stream=%s call=%s", self.stream_sid, self.call_sid)
        elif event == "stop":
            self._stopped = True

    async def send_audio(self, audio: bytes) -> None:
        if self._stopped or not self.stream_sid or not audio:
            return
        await self._websocket.send_text(media_frame(self.stream_sid, audio))

    async def clear(self) -> None:
        if self._stopped or not self.stream_sid:
            return
        await self._websocket.send_text(clear_frame(self.stream_sid))

    async def close(self) -> None:
        self._stopped = True
        if self._closed:
            return
        self._closed = True
        try:
            await self._websocket.close()
        except RuntimeError as exc:
            # Already closed by the peer or the ASGI server.
            LOGGER.debug("Twilio media stream close ignored: %s", exc)
