"""Agent error hierarchy.

Only ``InferenceError`` is allowed to escape the conversation loop; tool-level
failures are converted to text before they reach it.
"""

from __future__ import annotations


class AgentError(Exception):
    """Base for all agent errors."""


class InferenceError(AgentError):
    """The inference backend call failed (transport, HTTP status, or body)."""


class ToolArgumentError(AgentError):
    """A tool call carried an argument payload that could not be decoded."""
