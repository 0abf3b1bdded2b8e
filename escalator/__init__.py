"""MCP Escalator: routes unsolved problems to a larger OpenAI model."""

__version__ = "1.0.0"
