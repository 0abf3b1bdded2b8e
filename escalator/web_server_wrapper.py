"""Legacy HTTP facade for the ``get_help`` tool.

Endpoint:
  POST /get_help   -> body: {"question": "...", "summary": "...", "relevant_code": "..."}
                      200 {"answer": "..."} | 400 malformed | 503 unavailable

The body is the tool's arguments directly; there is no JSON-RPC envelope here.
Any other method on the path gets 405.
"""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.concurrency import run_in_threadpool

from escalator import __version__
from escalator.get_help import UNAVAILABLE_MESSAGE
from escalator.server import McpServer

logger = logging.getLogger(__name__)

HELP_TOOL = "get_help"


class HelpRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    question: str = Field("", description="The specific question or problem you need help with")
    summary: str = Field("", description="Brief summary of your project context")
    relevant_code: str = Field("", description="Any relevant code snippets (optional)")


def create_app(server: McpServer) -> FastAPI:
    app = FastAPI(title="MCP Escalator", version=__version__)

    @app.post("/get_help")
    async def get_help(request: Request):
        logger.info("Got HTTP request")
        try:
            req = HelpRequest.model_validate_json(await request.body())
        except ValidationError:
            logger.info("Couldn't decode the JSON")
            return JSONResponse(status_code=400, content={"error": "malformed request"})

        tool = server.tools.get(HELP_TOOL)
        if tool is None:
            return JSONResponse(status_code=503, content={"error": "Tool not available"})

        # Tool calls block on the network; keep them off the event loop.
        outcome = await run_in_threadpool(tool.call, req.model_dump())
        answer = outcome.first_text()
        if outcome.is_error or answer is None:
            logger.warning("Tool call failed: %s", outcome.error)
            return JSONResponse(status_code=503, content={"error": UNAVAILABLE_MESSAGE})
        return {"answer": answer}

    return app


def run(server: McpServer, host: str = "127.0.0.1", port: int = 9001) -> None:
    logger.info("Starting HTTP server on %s:%d", host, port)
    uvicorn.run(create_app(server), host=host, port=port, log_config=None)
