"""In-memory conversation transcript."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

USER = "user"
ASSISTANT = "assistant"
TOOL = "tool"


@dataclass(frozen=True)
class ToolCallRequest:
    """Tool call request emitted by the model.

    ``arguments`` is the raw payload as received from the backend; it is only
    decoded by the tool that ends up handling it.
    """

    name: str
    arguments: Any = None

    def to_message(self) -> dict[str, Any]:
        return {"function": {"name": self.name, "arguments": self.arguments}}


@dataclass(frozen=True)
class Turn:
    role: str
    content: str = ""
    tool_calls: tuple[ToolCallRequest, ...] = field(default_factory=tuple)

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0

    def to_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [call.to_message() for call in self.tool_calls]
        return message


class Transcript:
    """Append-only, ordered sequence of turns replayed on every backend call."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def add_message(self, role: str, content: str) -> Turn:
        turn = Turn(role=role, content=content)
        self.append(turn)
        return turn

    def to_messages(self) -> list[dict[str, Any]]:
        return [turn.to_message() for turn in self._turns]

    @property
    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def __getitem__(self, index: int) -> Turn:
        return self._turns[index]
