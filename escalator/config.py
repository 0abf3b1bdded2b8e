"""Runtime configuration read from the environment (and a local .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from escalator.errors import MissingCredentialError

API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_SUMMARY_PATH = Path("./README.md")
DEFAULT_LOG_FILE = Path("/tmp/escalator.log")


@dataclass(slots=True)
class Settings:
    """Process settings; CLI flags override what is read here."""

    model: str = DEFAULT_MODEL
    summary_path: Path = DEFAULT_SUMMARY_PATH
    host: str = "127.0.0.1"
    port: int = 9001
    log_file: Path = DEFAULT_LOG_FILE
    timeout_seconds: float = 180.0
    quiet: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults suited to local use."""

        return cls(
            model=os.getenv("OPENAI_MODEL") or DEFAULT_MODEL,
            summary_path=Path(os.getenv("ESCALATOR_SUMMARY_PATH") or DEFAULT_SUMMARY_PATH),
            host=os.getenv("ESCALATOR_HOST", "127.0.0.1"),
            port=int(os.getenv("ESCALATOR_PORT", "9001")),
            log_file=Path(os.getenv("ESCALATOR_LOG_FILE") or DEFAULT_LOG_FILE),
            timeout_seconds=float(os.getenv("ESCALATOR_TIMEOUT_SECONDS", "180")),
            quiet=_env_flag("ESCALATOR_QUIET"),
        )


def require_api_key() -> str:
    """Return the OpenAI key or fail; called once before any transport starts."""

    key = os.getenv(API_KEY_ENV, "").strip()
    if not key:
        raise MissingCredentialError(f"{API_KEY_ENV} environment variable is required")
    return key


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}
