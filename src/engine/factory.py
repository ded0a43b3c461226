"""Factory returning the configured realtime engine."""

from __future__ import annotations

from config.settings import Settings
from engine.base import BaseReasoningEngine
from engine.openai_realtime import OpenAIRealtimeEngine, build_function_tools
from prompts.loader import load_prompt
from reception.tool_handlers import ToolHandlers

RECEPTIONIST_PROMPT = "receptionist.txt"


def build_reasoning_engine(settings: Settings, handlers: ToolHandlers) -> BaseReasoningEngine:
    """Instantiate the realtime engine with the receptionist persona and tools."""

    instructions = load_prompt(RECEPTIONIST_PROMPT, firm_name=settings.law_firm_name)
    return OpenAIRealtimeEngine(
        api_key=settings.openai_api_key,
        agent_name=f"{settings.law_firm_name} AI Assistant",
        instructions=instructions,
        tools=build_function_tools(handlers),
        model=settings.realtime_model,
        voice=settings.realtime_voice,
        transcription_model=settings.transcription_model,
    )
