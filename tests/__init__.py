"""
Test suite for sequential-thinking-tool.

This package contains tests covering:
- Unit tests for the tracker, validators and configuration
- Thread safety tests for concurrent submissions
- Handler and tool spec tests
- End-to-end MCP tool calls through an in-memory client
"""
