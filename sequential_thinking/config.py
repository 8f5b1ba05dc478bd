"""
Startup configuration for the sequential thinking MCP server.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple


THOUGHT_LOGGING_ENV = "ENABLE_SEQUENTIAL_THINKING_LOG"

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}


class ServerError(RuntimeError):
    """Raised when the server cannot be configured or stops serving."""
    pass


def parse_bool(value: Optional[str]) -> bool:
    """Interpret an environment flag. Unset or unrecognised values are False."""
    return value in _TRUE_VALUES


def parse_http_addr(addr: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` listen address.

    Raises:
        ServerError: If the port is missing, not numeric or out of range
    """
    host, sep, port_text = addr.rpartition(":")
    if not sep or not port_text.isdecimal():
        raise ServerError(f"invalid http address {addr!r}: expected host:port")

    port = int(port_text)
    if port > 65535:
        raise ServerError(f"invalid http address {addr!r}: port out of range")

    return host.strip("[]") or "0.0.0.0", port


@dataclass
class ServerConfig:
    """Settings resolved once by the entry point."""

    # Listen address for streamable HTTP; empty means stdio
    http_addr: str = ""

    # File receiving DEBUG logs; empty disables logging
    log_path: str = ""

    # Write a frame per thought to stderr
    enable_thought_logging: bool = False

    @classmethod
    def from_env(cls, http_addr: str = "", log_path: str = "",
                 environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        return cls(
            http_addr=http_addr or "",
            log_path=log_path or "",
            enable_thought_logging=parse_bool(env.get(THOUGHT_LOGGING_ENV)),
        )

    @property
    def use_http(self) -> bool:
        return bool(self.http_addr)
