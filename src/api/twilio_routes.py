"""Twilio Voice integration.

This module provides:
- Incoming-call webhook answering with TwiML that greets the caller and opens a
  bidirectional media stream back to this host.
- The media-stream WebSocket, where each connection becomes one ``CallSession``.
"""

from __future__ import annotations

import logging
from xml.sax.saxutils import escape, quoteattr

from fastapi import APIRouter, Depends, Request, Response, WebSocket

from api.dependencies import ReceptionServices, get_services
from config.settings import get_settings
from integrations.twilio_streaming import TwilioMediaTransport
from reception.session import CallSession

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["twilio"])

MEDIA_STREAM_PATH = "/media-stream"


def _twiml_response(xml: str) -> Response:
    return Response(content=xml, media_type="text/xml")


def _twiml_connect_stream(*, greeting: str, voice: str, stream_url: str) -> str:
    return (
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>"
        "<Response>"
        f"<Say voice={quoteattr(voice)}>{escape(greeting)}</Say>"
        "<Connect>"
        f"<Stream url={quoteattr(stream_url)} />"
        "</Connect>"
        "</Response>"
    )


def _stream_url(request: Request) -> str:
    host = request.headers.get("host") or request.url.netloc
    return f"wss://{host}{MEDIA_STREAM_PATH}"


@router.api_route("/incoming-call", methods=["GET", "POST"])
async def incoming_call(request: Request) -> Response:
    settings = get_settings()
    stream_url = _stream_url(request)
    LOGGER.info("Incoming call; connecting media stream to %s", stream_url)
    return _twiml_response(
        _twiml_connect_stream(
            greeting=settings.welcome_greeting,
            voice=settings.say_voice,
            stream_url=stream_url,
        )
    )


@router.websocket(MEDIA_STREAM_PATH)
async def media_stream(
    websocket: WebSocket,
    services: ReceptionServices = Depends(get_services),
) -> None:
    await websocket.accept()
    session = CallSession(
        TwilioMediaTransport(websocket),
        services.engine,
        services.notifier,
        transcript_recipient=services.settings.law_firm_email,
    )
    state = await session.run()
    LOGGER.info("Media stream handler finished in state %s", state.value)
