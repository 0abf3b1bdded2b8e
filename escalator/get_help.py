"""The ``get_help`` tool: escalate a hard problem to a larger model."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from escalator.context import load_context
from escalator.errors import EscalatorError, MissingRequiredFieldsError
from escalator.prompts import build_prompt
from escalator.tools import ToolResult, text_block
from escalator.upstream import UpstreamClient

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "The architect is currently unavailable. Please try again later."
MISSING_FIELDS_MESSAGE = "Error: Missing required fields: question and summary"
DEFAULT_TIMEOUT_SECONDS = 180.0

INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "question": {
            "type": "string",
            "description": "The specific question or problem you need help with",
        },
        "summary": {
            "type": "string",
            "description": "Brief summary of your project context",
        },
        "relevant_code": {
            "type": "string",
            "description": "Any relevant code snippets (optional)",
        },
    },
    "required": ["question", "summary"],
}


class GetHelpTool:
    name = "get_help"
    description = "Escalate difficult problems to OpenAI for expert guidance"

    def __init__(
        self,
        upstream: UpstreamClient,
        summary_path: Optional[Path] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        context_loader: Callable[[Optional[Path]], str] = load_context,
    ):
        self.upstream = upstream
        self.summary_path = summary_path
        self.timeout = timeout
        self._load_context = context_loader

    def input_schema(self) -> Dict[str, Any]:
        return INPUT_SCHEMA

    def call(self, arguments: Dict[str, Any]) -> ToolResult:
        question = _string_arg(arguments, "question")
        summary = _string_arg(arguments, "summary")
        relevant_code = _string_arg(arguments, "relevant_code")

        if not question or not summary:
            return ToolResult(
                [text_block(MISSING_FIELDS_MESSAGE)],
                MissingRequiredFieldsError("missing required fields: question and summary"),
            )

        try:
            project_context = self._load_context(self.summary_path)
            prompt = build_prompt(summary, question, relevant_code, context=project_context)
            logger.info("Ready to call OpenAI (%d prompt characters)", len(prompt))
            answer = self.upstream.complete(prompt, timeout=self.timeout)
        except EscalatorError as exc:
            logger.error("get_help failed: %s: %s", type(exc).__name__, exc)
            return ToolResult([text_block(UNAVAILABLE_MESSAGE)], exc)

        logger.info("OpenAI call completed successfully")
        return ToolResult([text_block(answer)])


def _string_arg(arguments: Dict[str, Any], key: str) -> str:
    value = (arguments or {}).get(key)
    return value if isinstance(value, str) else ""
