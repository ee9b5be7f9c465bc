"""Terminal chat agent that lets a local Ollama model call file tools."""

from .errors import AgentError, InferenceError, ToolArgumentError
from .loop import ChatAgent, LoopState
from .provider import OllamaProvider
from .tools import ListFilesTool, ReadFileTool, Tool, ToolRegistry, build_default_tools
from .transcript import ToolCallRequest, Transcript, Turn

__all__ = [
    "AgentError",
    "ChatAgent",
    "InferenceError",
    "ListFilesTool",
    "LoopState",
    "OllamaProvider",
    "ReadFileTool",
    "Tool",
    "ToolArgumentError",
    "ToolCallRequest",
    "ToolRegistry",
    "Transcript",
    "Turn",
    "build_default_tools",
]
