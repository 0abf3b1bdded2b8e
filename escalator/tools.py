"""Tool (capability) interface shared by the server and the HTTP wrapper."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol


def text_block(text: str) -> Dict[str, str]:
    return {"type": "text", "text": text}


@dataclass
class ToolResult:
    """Outcome of one invocation.

    ``content`` is always present, even on failure: a tool may explain the
    problem to the user while ``error`` carries the real cause.
    """

    content: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def first_text(self) -> Optional[str]:
        if self.content and self.content[0].get("type") == "text":
            return self.content[0].get("text")
        return None


class Tool(Protocol):
    name: str
    description: str

    def input_schema(self) -> Dict[str, Any]: ...

    def call(self, arguments: Dict[str, Any]) -> ToolResult: ...


def describe(tool: Tool) -> Dict[str, Any]:
    return {"name": tool.name, "description": tool.description, "inputSchema": tool.input_schema()}
