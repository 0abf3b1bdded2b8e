"""MCP server for the escalator (stdio JSON-RPC, one message per line).

Implements:
  - initialize   (server identity and protocol capabilities)
  - tools/list   (enumerate registered tools)
  - tools/call   (invoke a tool by name)

Requests are handled strictly one at a time, so responses come back in the
order the requests were read.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import IO, Any, Dict, Optional, TextIO

from escalator import __version__
from escalator.errors import (
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
    UnknownToolError,
)
from escalator.tools import Tool, describe

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2025-03-26"


@dataclass
class JsonRpcRequest:
    method: str
    id: Any = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @classmethod
    def from_dict(cls, msg: Any) -> JsonRpcRequest:
        if not isinstance(msg, dict):
            raise InvalidRequestError()
        method = msg.get("method")
        if not isinstance(method, str) or not method:
            raise InvalidRequestError()
        params = msg.get("params")
        if params is None:
            params = {}
        return cls(method=method, id=msg.get("id"), params=params)

    def to_dict(self) -> Dict[str, Any]:
        msg: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id, "method": self.method}
        if self.params:
            msg["params"] = self.params
        return msg


@dataclass
class JsonRpcResponse:
    """Carries exactly one of ``result`` or ``error``."""

    id: Any = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None

    @classmethod
    def success(cls, _id: Any, result: Dict[str, Any]) -> JsonRpcResponse:
        return cls(id=_id, result=result)

    @classmethod
    def failure(cls, _id: Any, error: ProtocolError) -> JsonRpcResponse:
        return cls(id=_id, error=error.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        msg: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id}
        if self.error is not None:
            msg["error"] = self.error
        else:
            msg["result"] = self.result if self.result is not None else {}
        return msg

    @classmethod
    def from_dict(cls, msg: Dict[str, Any]) -> JsonRpcResponse:
        if "error" in msg:
            return cls(id=msg.get("id"), error=msg["error"])
        return cls(id=msg.get("id"), result=msg.get("result"))


class McpServer:
    """Tool registry plus the three protocol methods."""

    def __init__(self, name: str = "escalator", version: str = __version__):
        self.server_info = {"name": name, "version": version}
        self.tools: Dict[str, Tool] = {}
        self._methods = {
            "initialize": self.initialize,
            "tools/list": self.tools_list,
            "tools/call": self.tools_call,
        }

    def register(self, tool: Tool) -> None:
        """Add a tool before serving starts; a duplicate name replaces the old one."""
        if tool.name in self.tools:
            logger.debug("Replacing registered tool %s", tool.name)
        self.tools[tool.name] = tool

    def initialize(self, _params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": dict(self.server_info),
        }

    def tools_list(self, _params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": [describe(tool) for tool in self.tools.values()]}

    def tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(params, dict):
            raise InvalidParamsError()
        name = params.get("name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(name, str) or not isinstance(arguments, dict):
            raise InvalidParamsError()
        tool = self.tools.get(name)
        if tool is None:
            logger.warning("Unknown tool: %s", name)
            raise UnknownToolError(f"Unknown tool: {name}")

        outcome = tool.call(arguments)
        if outcome.is_error:
            logger.warning("Tool %s failed: %s", name, outcome.error)
            return {"content": outcome.content, "isError": True}
        return {"content": outcome.content}

    def handle(self, msg: Any) -> Optional[JsonRpcResponse]:
        """Process one decoded message. Never raises.

        Returns ``None`` for notifications, which get no reply.
        """
        _id = msg.get("id") if isinstance(msg, dict) else None
        try:
            request = JsonRpcRequest.from_dict(msg)
        except ProtocolError as exc:
            logger.warning("Rejected malformed request envelope (id=%r)", _id)
            return JsonRpcResponse.failure(_id, exc)

        logger.info("Got JSON-RPC request: method=%s, id=%r", request.method, request.id)
        if request.is_notification and request.method.startswith("notifications/"):
            logger.debug("Ignoring notification %s", request.method)
            return None

        handler = self._methods.get(request.method)
        try:
            if handler is None:
                logger.warning("Unknown method: %s", request.method)
                raise MethodNotFoundError(f"Method not found: {request.method}")
            return JsonRpcResponse.success(request.id, handler(request.params))
        except ProtocolError as exc:
            return JsonRpcResponse.failure(request.id, exc)
        except Exception:
            logger.exception("Unhandled error while processing %s", request.method)
            return JsonRpcResponse.failure(request.id, InternalError())


def send(obj: Dict[str, Any], stdout: TextIO) -> None:
    stdout.write(json.dumps(obj) + "\n")
    stdout.flush()


def run_stdio(server: McpServer, stdin: Optional[IO] = None, stdout: Optional[TextIO] = None) -> None:
    """Serve until end of input. Each line is one request, each reply one line.

    stdin is read as bytes when possible so a line that is not UTF-8 only
    costs that request a parse error.
    """
    stdin = stdin or getattr(sys.stdin, "buffer", sys.stdin)
    stdout = stdout or sys.stdout
    for raw in stdin:
        try:
            line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            line = line.strip()
            if not line:
                continue
            msg = json.loads(line)
        except (ValueError, RecursionError) as exc:
            logger.warning("Error decoding JSON-RPC: %s", exc)
            send(JsonRpcResponse.failure(None, ParseError()).to_dict(), stdout)
            continue
        response = server.handle(msg)
        if response is not None:
            send(response.to_dict(), stdout)
    logger.info("stdin closed, shutting down")
