"""Loads the project summary document handed to the architect as context."""

from __future__ import annotations

import logging
from pathlib import Path

from escalator.config import DEFAULT_SUMMARY_PATH
from escalator.errors import ContextUnavailableError

logger = logging.getLogger(__name__)


def load_context(path: Path | str | None = None) -> str:
    """Read the whole context document; an empty path means ./README.md."""
    target = Path(path) if path else DEFAULT_SUMMARY_PATH
    try:
        content = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ContextUnavailableError(f"cannot read context document {target}: {exc}") from exc
    logger.debug("Loaded %d characters of context from %s", len(content), target)
    return content
