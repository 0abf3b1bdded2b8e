"""Error taxonomy for the escalator.

Capability-level errors are caught by the tool and turned into a generic
user-facing message. Protocol-level errors carry a stable JSON-RPC code and
are returned to the caller as-is.
"""

from __future__ import annotations

from typing import Any, Dict


class EscalatorError(Exception):
    """Base class for every error raised by this package."""


class MissingCredentialError(EscalatorError):
    """The upstream API key is not configured; the process cannot serve."""


# --------------------------- Capability failures ---------------------------

class MissingRequiredFieldsError(EscalatorError):
    pass


class ContextUnavailableError(EscalatorError):
    pass


class PromptTooLargeError(EscalatorError):
    def __init__(self, estimated_tokens: int, limit: int):
        super().__init__(f"prompt exceeds {limit:,} token limit (estimated {estimated_tokens:,})")
        self.estimated_tokens = estimated_tokens
        self.limit = limit


class UpstreamError(EscalatorError):
    """Any failure of the outbound completion call."""


class UpstreamTransientError(UpstreamError):
    """Rate limiting or server-side trouble; worth another attempt."""


class UpstreamFatalError(UpstreamError):
    """Auth failures, malformed requests and the like; retrying will not help."""


class EmptyResponseError(UpstreamFatalError):
    pass


class DeadlineExceededError(UpstreamError):
    pass


# --------------------------- Protocol errors ---------------------------

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ProtocolError(EscalatorError):
    code = INTERNAL_ERROR
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ParseError(ProtocolError):
    code = PARSE_ERROR
    default_message = "Parse error"


class InvalidRequestError(ProtocolError):
    code = INVALID_REQUEST
    default_message = "Invalid Request"


class MethodNotFoundError(ProtocolError):
    code = METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidParamsError(ProtocolError):
    code = INVALID_PARAMS
    default_message = "Invalid params"


class UnknownToolError(InvalidParamsError):
    default_message = "Unknown tool"


class InternalError(ProtocolError):
    pass
