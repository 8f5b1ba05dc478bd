"""
Unit tests for the dictionary tool handlers and TOOL_SPECS.

Includes input validation, error handling, and JSON output format validation.
"""
import json
import pytest

from sequential_thinking import (
    TOOL_NAME,
    TOOL_SPECS,
    SequentialThinkingServer,
    create_handlers,
    create_sequential_thinking_handler,
)


class TestSequentialThinkingHandler:
    """Test the handler returned by create_sequential_thinking_handler."""

    def setup_method(self):
        """Bind a fresh tracker for each test."""
        self.server = SequentialThinkingServer()
        self.handler = create_sequential_thinking_handler(self.server)

    def test_valid_thought(self):
        result = json.loads(self.handler(
            thought="Test reasoning step",
            nextThoughtNeeded=True,
            thoughtNumber=1,
            totalThoughts=3,
        ))

        assert result == {
            "thoughtNumber": 1,
            "totalThoughts": 3,
            "nextThoughtNeeded": True,
            "branches": [],
            "thoughtHistoryLength": 1,
        }

    def test_branching_through_handler(self):
        self.handler(thought="main", nextThoughtNeeded=True, thoughtNumber=1, totalThoughts=3)
        result = json.loads(self.handler(
            thought="alternative",
            nextThoughtNeeded=True,
            thoughtNumber=2,
            totalThoughts=3,
            branchFromThought=1,
            branchId="alt-approach",
        ))

        assert result["branches"] == ["alt-approach"]
        assert result["thoughtHistoryLength"] == 2
        assert self.server.branches == ("alt-approach",)

    def test_validation_error_returned_as_json(self):
        result = json.loads(self.handler(
            thought="",
            nextThoughtNeeded=True,
            thoughtNumber=1,
            totalThoughts=1,
        ))

        assert result["status"] == "error"
        assert result["field"] == "thought"
        assert result["message"] == "invalid thought: must be a string"
        assert self.server.thought_history_length == 0

    def test_missing_parameters_handled(self):
        """Missing required parameters don't crash the handler."""
        result = json.loads(self.handler())
        assert result["status"] == "error"
        assert "message" in result

    def test_type_error_handled(self):
        result = json.loads(self.handler(
            thought="ok",
            nextThoughtNeeded=True,
            thoughtNumber="1",
            totalThoughts=1,
        ))
        assert result["status"] == "error"
        assert result["field"] == "thoughtNumber"

    def test_unicode_preserved(self):
        result_json = self.handler(
            thought="思考步骤 🤔",
            nextThoughtNeeded=False,
            thoughtNumber=1,
            totalThoughts=1,
            branchFromThought=1,
            branchId="分支",
        )
        assert "分支" in result_json
        assert json.loads(result_json)["branches"] == ["分支"]

    def test_handlers_share_tracker(self):
        other = create_sequential_thinking_handler(self.server)
        self.handler(thought="a", nextThoughtNeeded=True, thoughtNumber=1, totalThoughts=2)
        result = json.loads(other(thought="b", nextThoughtNeeded=False, thoughtNumber=2, totalThoughts=2))

        assert result["thoughtHistoryLength"] == 2


class TestCreateHandlers:

    def test_handler_mapping(self):
        handlers = create_handlers(SequentialThinkingServer())
        assert list(handlers) == [TOOL_NAME]
        assert callable(handlers[TOOL_NAME])

    def test_separate_trackers_are_isolated(self):
        first = create_handlers(SequentialThinkingServer())[TOOL_NAME]
        second = create_handlers(SequentialThinkingServer())[TOOL_NAME]

        first(thought="x", nextThoughtNeeded=True, thoughtNumber=1, totalThoughts=1)
        result = json.loads(second(thought="y", nextThoughtNeeded=True, thoughtNumber=1, totalThoughts=1))

        assert result["thoughtHistoryLength"] == 1


class TestToolSpecs:
    """Test the Converse-style tool specification."""

    def test_single_tool(self):
        assert len(TOOL_SPECS) == 1
        spec = TOOL_SPECS[0]["toolSpec"]
        assert spec["name"] == TOOL_NAME == "sequentialthinking"
        assert "reflective problem-solving" in spec["description"]

    def test_required_fields(self):
        schema = TOOL_SPECS[0]["toolSpec"]["inputSchema"]["json"]
        assert schema["required"] == ["thought", "nextThoughtNeeded", "thoughtNumber", "totalThoughts"]

    @pytest.mark.parametrize("field", ["thoughtNumber", "totalThoughts", "revisesThought", "branchFromThought"])
    def test_integer_minimums(self, field):
        prop = TOOL_SPECS[0]["toolSpec"]["inputSchema"]["json"]["properties"][field]
        assert prop["type"] == "integer"
        assert prop["minimum"] == 1

    def test_schema_matches_handler_parameters(self):
        """Every schema property is accepted by the handler."""
        properties = TOOL_SPECS[0]["toolSpec"]["inputSchema"]["json"]["properties"]
        handler = create_sequential_thinking_handler(SequentialThinkingServer())

        result = json.loads(handler(
            thought="all fields",
            nextThoughtNeeded=True,
            thoughtNumber=2,
            totalThoughts=3,
            isRevision=True,
            revisesThought=1,
            branchFromThought=1,
            branchId="b",
            needsMoreThoughts=False,
        ))

        assert set(properties) == {
            "thought", "nextThoughtNeeded", "thoughtNumber", "totalThoughts", "isRevision",
            "revisesThought", "branchFromThought", "branchId", "needsMoreThoughts",
        }
        assert result["thoughtHistoryLength"] == 1
