"""OpenAI Agents SDK realtime engine."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

from agents import FunctionTool, RunContextWrapper
from agents.realtime import RealtimeAgent, RealtimeRunner, RealtimeSession

from engine.base import BaseReasoningEngine
from reception.errors import EngineConnectionError
from reception.tool_handlers import ToolHandlers, ToolSpec

LOGGER = logging.getLogger(__name__)

# Twilio media streams carry 8 kHz G.711 mu-law in both directions.
TWILIO_AUDIO_FORMAT = "g711_ulaw"


def _function_tool(handlers: ToolHandlers, spec: ToolSpec) -> FunctionTool:
    async def on_invoke_tool(ctx: RunContextWrapper[Any], arguments: str) -> str:
        return await handlers.invoke(spec.name, arguments)

    return FunctionTool(
        name=spec.name,
        description=spec.description,
        params_json_schema=spec.request_model.model_json_schema(),
        on_invoke_tool=on_invoke_tool,
        strict_json_schema=False,
    )


def build_function_tools(handlers: ToolHandlers) -> list[FunctionTool]:
    return [_function_tool(handlers, spec) for spec in handlers.specs]


class OpenAIRealtimeSession:
    """Adapts ``RealtimeSession`` to the engine session protocol."""

    def __init__(self, session: RealtimeSession) -> None:
        self._session = session

    async def connect(self) -> None:
        try:
            await self._session.enter()
        except Exception as exc:
            raise EngineConnectionError(f"Realtime handshake failed: {exc}") from exc
        LOGGER.info("Connected to OpenAI realtime API")

    async def close(self) -> None:
        await self._session.close()

    async def send_audio(self, audio: bytes) -> None:
        await self._session.send_audio(audio)

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._session.__aiter__()


class OpenAIRealtimeEngine(BaseReasoningEngine):
    def __init__(
        self,
        *,
        api_key: str,
        agent_name: str,
        instructions: str,
        tools: list[FunctionTool],
        model: str,
        voice: str,
        transcription_model: str | None = None,
    ) -> None:
        self._api_key = api_key
        agent = RealtimeAgent(name=agent_name, instructions=instructions, tools=tools)

        model_settings: dict[str, Any] = {
            "model_name": model,
            "voice": voice,
            "input_audio_format": TWILIO_AUDIO_FORMAT,
            "output_audio_format": TWILIO_AUDIO_FORMAT,
            "turn_detection": {
                "type": "semantic_vad",
                "interrupt_response": True,
                "create_response": True,
            },
        }
        if transcription_model:
            model_settings["input_audio_transcription"] = {"model": transcription_model}

        self._runner = RealtimeRunner(
            starting_agent=agent,
            config={"model_settings": model_settings},
        )

    async def create_session(self) -> OpenAIRealtimeSession:
        session = await self._runner.run(model_config={"api_key": self._api_key})
        return OpenAIRealtimeSession(session)
