"""Shared abstractions for the realtime reasoning engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any, Protocol


class EngineSession(Protocol):
    """One call's bidirectional event stream with the engine.

    Iterating yields typed events in emission order; at most one consumer may
    iterate a session.
    """

    async def connect(self) -> None:  # pragma: no cover - protocol stub
        ...

    async def close(self) -> None:  # pragma: no cover - protocol stub
        ...

    async def send_audio(self, audio: bytes) -> None:  # pragma: no cover - protocol stub
        ...

    def __aiter__(self) -> AsyncIterator[Any]:  # pragma: no cover - protocol stub
        ...


class BaseReasoningEngine(ABC):
    """Abstract base class for realtime engine providers."""

    @abstractmethod
    async def create_session(self) -> EngineSession:
        """Construct a new, not yet connected, session for one call."""
