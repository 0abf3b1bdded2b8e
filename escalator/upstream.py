"""Outbound chat completion with bounded retries.

The chat model is anything with a LangChain-style ``invoke(messages)``;
production uses ``ChatOpenAI`` with its own retries disabled so the schedule
below is the only one in play.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Sequence

import openai
from langchain_core.messages import BaseMessage, HumanMessage
from langchain_openai import ChatOpenAI

from escalator.errors import (
    DeadlineExceededError,
    EmptyResponseError,
    UpstreamError,
    UpstreamFatalError,
    UpstreamTransientError,
)

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_SECONDS: tuple[float, ...] = (2.0, 4.0, 8.0)

_TRANSIENT_SDK_ERRORS = (
    openai.RateLimitError,
    openai.InternalServerError,
    openai.APIConnectionError,
)
_TRANSIENT_PATTERNS: tuple[str, ...] = (
    "rate limit",
    "too many requests",
    "429",
    "temporarily unavailable",
    "overloaded",
    "service unavailable",
    "bad gateway",
    "connection reset",
)


def classify_upstream_failure(exc: BaseException) -> UpstreamError:
    """Map an arbitrary upstream exception onto transient or fatal."""
    if isinstance(exc, UpstreamError):
        return exc
    if isinstance(exc, _TRANSIENT_SDK_ERRORS):
        return UpstreamTransientError(str(exc))
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        if status == 429 or status >= 500:
            return UpstreamTransientError(str(exc))
        return UpstreamFatalError(str(exc))
    text = str(exc).lower()
    if any(pattern in text for pattern in _TRANSIENT_PATTERNS):
        return UpstreamTransientError(str(exc))
    return UpstreamFatalError(str(exc))


def build_chat_model(model: str, api_key: str, timeout: float) -> ChatOpenAI:
    return ChatOpenAI(model=model, api_key=api_key, timeout=timeout, max_retries=0)


class UpstreamClient:
    """Sends one prompt as a single user message and returns the answer text."""

    def __init__(
        self,
        chat_model: Any,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        backoff: Sequence[float] = BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.chat_model = chat_model
        self.max_attempts = max_attempts
        self.backoff = tuple(backoff)
        self._sleep = sleep
        self._clock = clock

    def complete(self, prompt: str, timeout: Optional[float] = None) -> str:
        """Return the model's answer or raise an ``UpstreamError`` subclass.

        ``timeout`` bounds the whole call including backoff sleeps. Each
        attempt gets only the time left as its request timeout, and once the
        deadline passes the call fails with ``DeadlineExceededError`` instead
        of finishing the schedule.
        """
        deadline = None if timeout is None else self._clock() + timeout
        messages: List[BaseMessage] = [HumanMessage(content=prompt)]

        for attempt in range(self.max_attempts):
            call_kwargs = {}
            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    raise DeadlineExceededError(f"deadline exceeded before attempt {attempt + 1}")
                call_kwargs["timeout"] = remaining
            try:
                reply = self.chat_model.invoke(messages, **call_kwargs)
            except Exception as exc:
                if deadline is not None and self._clock() >= deadline:
                    raise DeadlineExceededError(
                        f"deadline exceeded during attempt {attempt + 1}: {exc}"
                    ) from exc
                failure = classify_upstream_failure(exc)
                if not isinstance(failure, UpstreamTransientError) or attempt == self.max_attempts - 1:
                    raise failure from exc
                delay = self.backoff[min(attempt, len(self.backoff) - 1)]
                if deadline is not None and self._clock() + delay >= deadline:
                    raise DeadlineExceededError(
                        f"deadline exceeded while retrying after attempt {attempt + 1}: {exc}"
                    ) from exc
                logger.warning(
                    "Upstream attempt %d/%d failed (%s), retrying in %.0fs",
                    attempt + 1, self.max_attempts, exc, delay,
                )
                self._sleep(delay)
                continue

            if deadline is not None and self._clock() >= deadline:
                raise DeadlineExceededError(f"answer arrived after the deadline on attempt {attempt + 1}")
            answer = _reply_text(reply)
            if not answer:
                raise EmptyResponseError("no response from OpenAI")
            return answer

        raise UpstreamFatalError("max retries exceeded")


def _reply_text(reply: Any) -> str:
    content = getattr(reply, "content", reply)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""
