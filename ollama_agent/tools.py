"""Tool interfaces, registry, and built-in filesystem tools."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from .errors import ToolArgumentError

TOOL_NOT_FOUND = "Error: Tool '{name}' not found"


class Tool(ABC):
    """Base tool contract.

    ``parameters`` is a hand-written JSON schema of object type. Arguments
    arrive as whatever the backend sent; ``decode_arguments`` and
    ``validate_params`` turn them into keyword arguments for ``execute`` or
    reject them.
    """

    _TYPE_MAP = {
        "string": str,
        "integer": int,
        "number": (int, float),
        "boolean": bool,
        "array": list,
        "object": dict,
    }

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        pass

    @abstractmethod
    async def execute(self, **kwargs: Any) -> str:
        pass

    @staticmethod
    def decode_arguments(payload: Any) -> dict[str, Any]:
        """Decode a raw argument payload into a parameter mapping.

        Raises:
            ToolArgumentError: If the payload is not a JSON object.
        """
        if payload is None or payload == "":
            return {}
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise ToolArgumentError(f"arguments are not valid JSON: {exc}") from exc
            if payload is None:
                return {}
        if not isinstance(payload, dict):
            raise ToolArgumentError(f"arguments must be a JSON object, got {type(payload).__name__}")
        return payload

    def validate_params(self, params: dict[str, Any]) -> list[str]:
        schema = self.parameters or {}
        if schema.get("type", "object") != "object":
            raise ValueError(f"Schema must be object type, got {schema.get('type')!r}")
        return self._validate(params, {**schema, "type": "object"}, "")

    def _validate(self, value: Any, schema: dict[str, Any], path: str) -> list[str]:
        expected_type = schema.get("type")
        label = path or "parameter"
        if expected_type in self._TYPE_MAP and not isinstance(value, self._TYPE_MAP[expected_type]):
            return [f"{label} should be {expected_type}"]

        errors: list[str] = []
        if "enum" in schema and value not in schema["enum"]:
            errors.append(f"{label} must be one of {schema['enum']}")
        if expected_type == "object":
            properties = schema.get("properties", {})
            for key in schema.get("required", []):
                if key not in value:
                    errors.append(f"missing required {path + '.' + key if path else key}")
            for key, item in value.items():
                if key in properties:
                    next_path = f"{path}.{key}" if path else key
                    errors.extend(self._validate(item, properties[key], next_path))
        if expected_type == "array" and "items" in schema:
            for idx, item in enumerate(value):
                next_path = f"{path}[{idx}]" if path else f"[{idx}]"
                errors.extend(self._validate(item, schema["items"], next_path))
        return errors

    def to_schema(self) -> dict[str, Any]:
        parameters = self.parameters or {}
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": parameters.get("properties", {}),
                    "required": parameters.get("required", []),
                },
            },
        }


class ToolRegistry:
    """Insertion-ordered tool catalog, assembled once at startup."""

    def __init__(self):
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get_definitions(self) -> list[dict[str, Any]]:
        return [tool.to_schema() for tool in self._tools.values()]

    async def execute(self, name: str, arguments: Any) -> str:
        """Run a tool and return its result as text.

        Unknown names, bad payloads and implementation errors all come back
        as an error string; nothing raised by a tool escapes this method.
        """
        tool = self._tools.get(name)
        if not tool:
            return TOOL_NOT_FOUND.format(name=name)
        try:
            params = tool.decode_arguments(arguments)
            errors = tool.validate_params(params)
        except ToolArgumentError as exc:
            errors = [str(exc)]
        if errors:
            return f"Error: Invalid parameters for tool '{name}': " + "; ".join(errors)
        try:
            return await tool.execute(**params)
        except Exception as exc:
            logger.warning(f"Tool execution failed for {name}: {exc}")
            return f"Error executing {name}: {exc}"

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools


def _safe_resolve_path(path: str, workspace: Path, restrict_to_workspace: bool) -> Path:
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = workspace / candidate
    resolved = candidate.resolve()
    if restrict_to_workspace:
        workspace_root = workspace.resolve()
        if resolved != workspace_root and workspace_root not in resolved.parents:
            raise PermissionError(f"Path outside workspace: {resolved}")
    return resolved


class ReadFileTool(Tool):
    def __init__(self, workspace: Path, restrict_to_workspace: bool = False):
        self.workspace = workspace
        self.restrict_to_workspace = restrict_to_workspace

    @property
    def name(self) -> str:
        return "read_file"

    @property
    def description(self) -> str:
        return (
            "Read the contents of a given relative file path. Use this when you want to see "
            "what's inside a file. Do not use this with directory names."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "The relative path of a file in the working directory.",
                },
            },
            "required": ["path"],
        }

    async def execute(self, path: str, **kwargs: Any) -> str:
        file_path = _safe_resolve_path(path, self.workspace, self.restrict_to_workspace)
        if not file_path.exists():
            return f"Error: File not found: {path}"
        if not file_path.is_file():
            return f"Error: Not a file: {path}"
        return file_path.read_text(encoding="utf-8")


def walk_entries(root: Path) -> Iterator[str]:
    """Yield every entry under ``root`` depth-first in lexical order.

    Entries are relative to ``root`` with ``/`` separators; directories carry a
    trailing ``/``. Symlinks are listed but never followed.
    """

    def _walk(current: Path) -> Iterator[str]:
        for entry in sorted(current.iterdir(), key=lambda p: p.name):
            rel = entry.relative_to(root).as_posix()
            if entry.is_dir() and not entry.is_symlink():
                yield f"{rel}/"
                yield from _walk(entry)
            else:
                yield rel

    yield from _walk(root)


class ListFilesTool(Tool):
    def __init__(self, workspace: Path, restrict_to_workspace: bool = False):
        self.workspace = workspace
        self.restrict_to_workspace = restrict_to_workspace

    @property
    def name(self) -> str:
        return "list_files"

    @property
    def description(self) -> str:
        return (
            "List files and directories at a given path. If no path is provided, "
            "lists files in the current directory."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": (
                        "Optional relative path to list files from. "
                        "Defaults to current directory if not provided."
                    ),
                },
            },
            "required": [],
        }

    def decode_arguments(self, payload: Any) -> dict[str, Any]:
        params = Tool.decode_arguments(payload)
        if params.get("path") is None:
            # null means "not provided"
            params.pop("path", None)
        return params

    async def execute(self, path: str = "", **kwargs: Any) -> str:
        dir_path = _safe_resolve_path(path or ".", self.workspace, self.restrict_to_workspace)
        if not dir_path.exists():
            return f"Error: Directory not found: {path}"
        if not dir_path.is_dir():
            return f"Error: Not a directory: {path}"
        return json.dumps(list(walk_entries(dir_path)), ensure_ascii=False, separators=(",", ":"))


def build_default_tools(workspace: Path | None = None, restrict_to_workspace: bool = False) -> ToolRegistry:
    """Build the default tool registry: ``read_file`` then ``list_files``."""
    root = workspace if workspace is not None else Path.cwd()
    registry = ToolRegistry()
    registry.register(ReadFileTool(workspace=root, restrict_to_workspace=restrict_to_workspace))
    registry.register(ListFilesTool(workspace=root, restrict_to_workspace=restrict_to_workspace))
    return registry
