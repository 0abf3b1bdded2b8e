"""Command-line entrypoint: ``escalator [--http] [--summary PATH] ...``."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
from dotenv import load_dotenv

from escalator import __version__
from escalator.config import Settings, require_api_key
from escalator.errors import MissingCredentialError
from escalator.get_help import GetHelpTool
from escalator.server import McpServer, run_stdio
from escalator.upstream import UpstreamClient, build_chat_model

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings, http_mode: bool) -> None:
    # stdout carries protocol frames in stdio mode, so logs go to a file there.
    if http_mode:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, stream=sys.stderr, force=True)
        return
    try:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, filename=str(settings.log_file), force=True)
    except OSError:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, stream=sys.stderr, force=True)
        logger.warning("Cannot open log file %s, logging to stderr", settings.log_file)


def build_server(settings: Settings, api_key: str) -> McpServer:
    chat_model = build_chat_model(settings.model, api_key, settings.timeout_seconds)
    server = McpServer("escalator", __version__)
    server.register(
        GetHelpTool(
            UpstreamClient(chat_model),
            summary_path=settings.summary_path,
            timeout=settings.timeout_seconds,
        )
    )
    return server


@click.command(help="MCP Escalator - Routes unsolved problems to OpenAI for clarification.")
@click.version_option(version=__version__, prog_name="escalator")
@click.option("--summary", "summary_path", type=click.Path(path_type=Path), default=None,
              help="Path to project summary file (default: ./README.md).")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Port to listen on in HTTP mode.")
@click.option("--host", default=None, help="Address to bind in HTTP mode.")
@click.option("--model", default=None, help="OpenAI model to use.")
@click.option("--http/--stdio", "--sse", "http_mode", default=False,
              help="Run as HTTP server instead of stdio mode.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Log file for stdio mode.")
@click.option("--timeout", "timeout_seconds", type=click.FloatRange(min=1), default=None,
              help="Overall deadline for one escalation, in seconds.")
def main(summary_path, port, host, model, http_mode, log_file, timeout_seconds) -> None:
    load_dotenv()
    settings = Settings.from_env()
    overrides = {
        "summary_path": summary_path,
        "port": port,
        "host": host,
        "model": model,
        "log_file": log_file,
        "timeout_seconds": timeout_seconds,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    try:
        api_key = require_api_key()
    except MissingCredentialError as exc:
        raise click.ClickException(str(exc)) from exc

    configure_logging(settings, http_mode)
    server = build_server(settings, api_key)

    if http_mode:
        # Imported lazily so stdio mode does not pay for the web stack.
        from escalator.web_server_wrapper import run

        logger.info(
            "Starting MCP Escalator on %s:%d (summary: %s, model: %s)",
            settings.host, settings.port, settings.summary_path, settings.model,
        )
        run(server, host=settings.host, port=settings.port)
        return

    if not settings.quiet:
        click.echo("[escalator] ready (methods: initialize, tools/list, tools/call)", err=True)
    logger.info("Serving stdio (summary: %s, model: %s)", settings.summary_path, settings.model)
    run_stdio(server)


if __name__ == "__main__":  # pragma: no cover
    main()
