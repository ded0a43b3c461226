from __future__ import annotations

LINE_SEPARATOR = "\n"


class TranscriptAccumulator:
    """Append-only record of one call's conversational turns.

    All writes come from the call's single event-consumption task, so no locking
    is needed. ``get`` is only read once the event stream has terminated.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    def add(self, line: str) -> None:
        self._lines.append(line)

    def get(self) -> str:
        return LINE_SEPARATOR.join(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)
