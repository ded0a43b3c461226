from __future__ import annotations

import asyncio
import base64
import json

from fastapi import WebSocketDisconnect

from integrations.twilio_streaming import TwilioMediaTransport, clear_frame, media_frame


def _run(coro):
    return asyncio.run(coro)


class FakeWebSocket:
    def __init__(self, frames: list[dict]) -> None:
        self._frames = [json.dumps(frame) for frame in frames]
        self.sent: list[dict] = []
        self.close_calls = 0

    async def receive_text(self) -> str:
        if not self._frames:
            raise WebSocketDisconnect(code=1000)
        return self._frames.pop(0)

    async def send_text(self, text: str) -> None:
        self.sent.append(json.loads(text))

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_calls > 1:
            raise RuntimeError("already closed")


def _media(payload: bytes, track: str | None = "inbound") -> dict:
    media = {"payload": base64.b64encode(payload).decode("ascii")}
    if track:
        media["track"] = track
    return {"event": "media", "media": media}


START = {"event": "start", "start": {"streamSid": "MZ1", "callSid": "CA1"}}


def test_media_frame_shape():
    frame = json.loads(media_frame("MZ1", b"\xff"))
    assert frame == {"event": "media", "streamSid": "MZ1", "media": {"payload": "/w=="}}
    assert json.loads(clear_frame("MZ1")) == {"event": "clear", "streamSid": "MZ1"}


def test_pump_forwards_inbound_audio_until_stop():
    websocket = FakeWebSocket(
        [
            {"event": "connected"},
            START,
            _media(b"\x01"),
            _media(b"\x02", track="outbound"),
            _media(b"\x03", track=None),
            {"event": "stop"},
            _media(b"\x04"),
        ]
    )
    transport = TwilioMediaTransport(websocket)
    received: list[bytes] = []

    async def on_audio(chunk: bytes) -> None:
        received.append(chunk)

    _run(transport.pump_inbound(on_audio))

    assert received == [b"\x01", b"\x03"]
    assert transport.stream_sid == "MZ1"
    assert transport.call_id == "CA1"


def test_pump_ends_on_disconnect():
    transport = TwilioMediaTransport(FakeWebSocket([START]))

    async def on_audio(chunk: bytes) -> None:
        raise AssertionError("no audio expected")

    _run(transport.pump_inbound(on_audio))
    # The peer is gone, so close() must not touch the socket.
    _run(transport.close())
    assert transport._websocket.close_calls == 0  # noqa: SLF001


def test_outbound_audio_requires_stream_sid():
    websocket = FakeWebSocket([])
    transport = TwilioMediaTransport(websocket)

    _run(transport.send_audio(b"\x01"))
    assert websocket.sent == []

    transport.stream_sid = "MZ1"
    _run(transport.send_audio(b"\x01"))
    _run(transport.clear())
    assert [frame["event"] for frame in websocket.sent] == ["media", "clear"]


def test_close_is_idempotent():
    websocket = FakeWebSocket([])
    transport = TwilioMediaTransport(websocket)

    _run(transport.close())
    _run(transport.close())

    assert websocket.close_calls == 1
    transport.stream_sid = "MZ1"
    _run(transport.send_audio(b"\x01"))
    assert websocket.sent == []
