"""Prompt assembly for the architect escalation."""

from __future__ import annotations

from escalator.errors import PromptTooLargeError

# Rough estimate only: ~4 characters per token. This is a cheap pre-flight
# guard, not a real tokenizer count.
CHARS_PER_TOKEN = 4
MAX_PROMPT_TOKENS = 20_000
MAX_PROMPT_CHARS = MAX_PROMPT_TOKENS * CHARS_PER_TOKEN

PROMPT_TEMPLATE = """As a software architect, provide help with this issue:

<project>
{context}
</project>

<summary>
{summary}
</summary>

---
**Question:** {question}

**Relevant Code:** {relevant_code}"""


def estimate_tokens(text: str) -> int:
    return len(text) // CHARS_PER_TOKEN


def build_prompt(summary: str, question: str, relevant_code: str = "", context: str = "") -> str:
    """Render the template verbatim and reject anything over the size limit.

    ``context`` is the project document loaded from disk, ``summary`` the
    caller's own description. Oversized prompts are never truncated; the
    caller decides what to drop.
    """
    prompt = PROMPT_TEMPLATE.format(
        context=context, summary=summary, question=question, relevant_code=relevant_code
    )
    if len(prompt) > MAX_PROMPT_CHARS:
        raise PromptTooLargeError(estimate_tokens(prompt), MAX_PROMPT_TOKENS)
    return prompt
