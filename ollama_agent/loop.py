"""Main chat-agent loop."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable

from loguru import logger
from rich.console import Console
from rich.text import Text

from .provider import OllamaProvider
from .tools import ToolRegistry
from .transcript import TOOL, USER, ToolCallRequest, Transcript, Turn

GREETING = "Chat with Ollama (use 'ctrl-c' to quit)"


class LoopState(str, Enum):
    AWAITING_USER_INPUT = "awaiting_user_input"
    PROCESSING_TOOL_CALLS = "processing_tool_calls"


def format_arguments(arguments: Any) -> str:
    if isinstance(arguments, str):
        return arguments
    return json.dumps(arguments, ensure_ascii=False, separators=(",", ":"))


class ChatAgent:
    """Tool-using chat agent driving a single in-memory conversation.

    ``get_user_message`` returns the next line of user input, or ``None``
    once the input source is exhausted, which ends :meth:`run` normally.
    Backend failures propagate out of :meth:`run`; tool failures do not.
    """

    def __init__(
        self,
        provider: OllamaProvider,
        tools: ToolRegistry,
        get_user_message: Callable[[], str | None],
        console: Console | None = None,
        greeting: str | None = GREETING,
    ):
        self.provider = provider
        self.tools = tools
        self.get_user_message = get_user_message
        self.console = console or Console()
        self.greeting = greeting
        self.transcript = Transcript()
        self.state = LoopState.AWAITING_USER_INPUT

    async def run(self) -> None:
        if self.greeting:
            self.console.print(self.greeting)

        definitions = self.tools.get_definitions()
        while True:
            if self.state is LoopState.AWAITING_USER_INPUT:
                user_input = self.get_user_message()
                if user_input is None:
                    logger.debug("Input exhausted, ending conversation")
                    break
                self.transcript.add_message(USER, user_input)

            response = await self.provider.chat(self.transcript, definitions)
            self.transcript.append(response)

            if response.has_tool_calls:
                results = await self.dispatch(response.tool_calls)
                self.transcript.append(Turn(role=TOOL, content=self._format_results(results)))
                self.state = LoopState.PROCESSING_TOOL_CALLS
            else:
                self._display(response.content)
                self.state = LoopState.AWAITING_USER_INPUT

    async def dispatch(self, tool_calls: tuple[ToolCallRequest, ...]) -> list[tuple[str, str]]:
        """Run every requested tool in order, returning ``(name, result)`` pairs."""
        results: list[tuple[str, str]] = []
        for call in tool_calls:
            if call.name in self.tools:
                self.console.print(
                    Text.assemble(("tool", "bold green"), f": {call.name}({format_arguments(call.arguments)})")
                )
            else:
                logger.warning(f"Model requested unknown tool: {call.name}")
            logger.debug(f"Executing tool: {call.name}")
            result = await self.tools.execute(call.name, call.arguments)
            results.append((call.name, result))
        return results

    @staticmethod
    def _format_results(results: list[tuple[str, str]]) -> str:
        lines = [f"Tool {name} result: {result}" for name, result in results]
        return "Tool results:\n" + "\n".join(lines)

    def _display(self, content: str) -> None:
        self.console.print(Text.assemble(("Ollama", "bold yellow"), ": ", content))
