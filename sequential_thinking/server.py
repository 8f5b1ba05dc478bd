"""
MCP server for sequential thinking and problem solving.

Exposes a single ``sequentialthinking`` tool backed by a
SequentialThinkingServer, over stdio (default) or streamable HTTP.

Usage:
    sequential-thinking                      # stdio
    sequential-thinking --http 127.0.0.1:8080
    sequential-thinking --logpath /tmp/sequential-thinking.log
"""

import argparse
import asyncio
import logging
import sys
from typing import Annotated, Any, List, Optional, Sequence

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from pydantic import BaseModel, Field
from pydantic_core import to_json

from . import __version__
from .config import ServerConfig, ServerError, parse_http_addr
from .core import (
    TOOL_DESCRIPTION,
    TOOL_NAME,
    SequentialThinkingServer,
)
from .models import ThoughtData
from .validators import InvalidInputError


logger = logging.getLogger(__name__)

SERVER_NAME = "sequential-thinking"

# Loggers routed to --logpath
LOGGED_PACKAGES = ("sequential_thinking", "fastmcp", "mcp")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Receives every MCP request and response when --logpath is set
message_logger = logging.getLogger("sequential_thinking.messages")


class ThoughtOutput(BaseModel):
    """Structured result of the sequentialthinking tool."""

    thoughtNumber: int = Field(description="Current thought number")
    totalThoughts: int = Field(description="Estimated total thoughts needed")
    nextThoughtNeeded: bool = Field(description="Whether another thought step is needed")
    branches: List[str] = Field(description="Registered branch identifiers, sorted")
    thoughtHistoryLength: int = Field(description="Number of thoughts processed so far")


def _message_json(message: Any) -> str:
    # Tool results carry their own MCP rendering
    if hasattr(message, "to_mcp_result"):
        message = message.to_mcp_result()
    return to_json(message, fallback=repr).decode("utf-8", errors="replace")


class MessageLoggingMiddleware(Middleware):
    """Log every MCP request and its response at DEBUG level."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or message_logger

    async def on_message(self, context: MiddlewareContext, call_next: CallNext) -> Any:
        self.log.debug("<- %s %s", context.method, _message_json(context.message))
        try:
            result = await call_next(context)
        except Exception as e:
            self.log.debug("-> %s error: %s: %s", context.method, type(e).__name__, e)
            raise
        self.log.debug("-> %s %s", context.method, _message_json(result))
        return result


def build_server(tracker: SequentialThinkingServer, log_messages: bool = False) -> FastMCP:
    """
    Create the MCP server with the sequentialthinking tool bound to tracker.

    With log_messages, requests and responses are written to the
    ``sequential_thinking.messages`` logger.
    """
    mcp = FastMCP(SERVER_NAME)
    if log_messages:
        mcp.add_middleware(MessageLoggingMiddleware())

    # Parameter names are the tool's wire names; types are strict so that
    # "2", 2.0 and true are not coerced into thought numbers
    @mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
    async def sequentialthinking(
        thought: Annotated[str, Field(strict=True, description="Your current thinking step")],
        nextThoughtNeeded: Annotated[bool, Field(strict=True, description="Whether another thought step is needed")],
        thoughtNumber: Annotated[int, Field(strict=True, ge=1, description="Current thought number (numeric value, e.g., 1, 2, 3)")],
        totalThoughts: Annotated[int, Field(strict=True, ge=1, description="Estimated total thoughts needed (numeric value, e.g., 5, 10)")],
        isRevision: Annotated[bool, Field(strict=True, description="Whether this revises previous thinking")] = False,
        revisesThought: Annotated[Optional[int], Field(strict=True, ge=1, description="Which thought is being reconsidered")] = None,
        branchFromThought: Annotated[Optional[int], Field(strict=True, ge=1, description="Branching point thought number")] = None,
        branchId: Annotated[Optional[str], Field(strict=True, description="Branch identifier")] = None,
        needsMoreThoughts: Annotated[bool, Field(strict=True, description="If more thoughts are needed")] = False,
    ) -> ThoughtOutput:
        data = ThoughtData(
            thought=thought,
            thought_number=thoughtNumber,
            total_thoughts=totalThoughts,
            next_thought_needed=nextThoughtNeeded,
            is_revision=isRevision,
            revises_thought=revisesThought,
            branch_from_thought=branchFromThought,
            branch_id=branchId,
            needs_more_thoughts=needsMoreThoughts,
        )
        try:
            snapshot = await asyncio.to_thread(tracker.process_thought, data)
        except InvalidInputError as e:
            logger.debug("Rejected thought: %s", e)
            raise ToolError(str(e)) from e
        return ThoughtOutput(**snapshot.to_dict())

    return mcp


def setup_logging(log_path: str) -> Optional[logging.Handler]:
    """
    Route package and MCP library logs to log_path at DEBUG level.

    Returns:
        The installed file handler, or None when log_path is empty

    Raises:
        ServerError: If the log file cannot be opened
    """
    if not log_path:
        logging.getLogger("sequential_thinking").addHandler(logging.NullHandler())
        return None

    try:
        handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as e:
        raise ServerError(f"open log file {log_path}: {e}") from e

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(logging.DEBUG)
    for name in LOGGED_PACKAGES:
        package_logger = logging.getLogger(name)
        package_logger.setLevel(logging.DEBUG)
        package_logger.addHandler(handler)
    return handler


def teardown_logging(handler: Optional[logging.Handler]) -> None:
    if handler is None:
        return
    for name in LOGGED_PACKAGES:
        logging.getLogger(name).removeHandler(handler)
    handler.close()


def run(config: ServerConfig) -> None:
    """
    Serve the sequentialthinking tool until the transport closes.

    Raises:
        ServerError: If logging cannot be set up or serving fails
    """
    handler = setup_logging(config.log_path)
    try:
        tracker = SequentialThinkingServer(enable_thought_logging=config.enable_thought_logging)
        mcp = build_server(tracker, log_messages=handler is not None)

        if config.use_http:
            try:
                host, port = parse_http_addr(config.http_addr)
                logger.info("sequential thinking MCP server running on http://%s:%d", host, port)
                mcp.run(transport="streamable-http", host=host, port=port)
            except Exception as e:
                logger.error("serve sequential thinking mcp http server: %s", e)
                raise ServerError(f"serve sequential thinking mcp http server: {e}") from e
            return

        try:
            logger.info("sequential thinking mcp server running on stdio")
            mcp.run(transport="stdio")
        except Exception as e:
            logger.error("serve sequential thinking mcp stdio server: %s", e)
            raise ServerError(f"serve sequential thinking mcp stdio server: {e}") from e
    finally:
        teardown_logging(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sequential-thinking",
        description="MCP server for sequential thinking and problem solving.",
    )
    parser.add_argument(
        "--http", default="", metavar="ADDR",
        help="if set, use streamable HTTP at this host:port address, instead of stdin/stdout",
    )
    parser.add_argument(
        "--logpath", default="", metavar="PATH",
        help="if set, write server logs to this file",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = ServerConfig.from_env(http_addr=args.http, log_path=args.logpath)

    try:
        run(config)
    except ServerError as e:
        print(f"sequential-thinking: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
