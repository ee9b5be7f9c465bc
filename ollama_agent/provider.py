"""Ollama `/api/chat` provider with tool-call parsing."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from .errors import InferenceError
from .transcript import ASSISTANT, ToolCallRequest, Transcript, Turn


class OllamaProvider:
    """Stateless adapter for a non-streaming Ollama chat endpoint.

    Every call replays the whole transcript; a failed call is never retried.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "qwen3:8b",
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_s = timeout_s
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/chat"

    def build_payload(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
        }
        if tools:
            payload["tools"] = tools
        return payload

    async def chat(self, transcript: Transcript, tools: list[dict[str, Any]] | None = None) -> Turn:
        """Send the transcript and tool catalog, return the assistant turn.

        Raises:
            InferenceError: On transport failure, an HTTP error status, an
                unparseable body or an error reported by the backend.
        """
        messages = transcript.to_messages()
        payload = self.build_payload(messages, tools or [])
        logger.debug(f"LLM request: model={self.model}, messages={len(messages)}, tools={len(tools or [])}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                resp = await client.post(self.endpoint, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise InferenceError(
                f"model endpoint returned HTTP {exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise InferenceError(f"error calling model endpoint: {exc}") from exc
        except ValueError as exc:
            raise InferenceError(f"failed to parse response: {exc}") from exc

        turn = self._parse_response(data)
        logger.debug(f"LLM response: content={len(turn.content)} chars, tool_calls={len(turn.tool_calls)}")
        return turn

    def _parse_response(self, data: Any) -> Turn:
        if not isinstance(data, dict):
            raise InferenceError(f"failed to parse response: expected a JSON object, got {data!r}")
        if data.get("error"):
            raise InferenceError(f"model endpoint error: {data['error']}")

        message = data.get("message")
        if not isinstance(message, dict):
            raise InferenceError(f"failed to parse response: missing message, body: {data!r}")

        content = message.get("content") or ""
        if not isinstance(content, str):
            content = str(content)

        raw_calls = message.get("tool_calls") or []
        if not isinstance(raw_calls, list):
            raise InferenceError(f"failed to parse response: tool_calls must be a list, got {raw_calls!r}")

        tool_calls: list[ToolCallRequest] = []
        for raw_call in raw_calls:
            function = raw_call.get("function") if isinstance(raw_call, dict) else None
            if not isinstance(function, dict) or not isinstance(function.get("name"), str):
                raise InferenceError(f"failed to parse response: malformed tool call {raw_call!r}")
            tool_calls.append(
                ToolCallRequest(
                    name=function["name"],
                    arguments=function.get("arguments"),
                )
            )

        return Turn(role=ASSISTANT, content=content, tool_calls=tuple(tool_calls))
