"""
Parameter validation module for sequential_thinking package.

This module keeps the input rules for thought submissions apart from the
state tracking in ``core``, so the rules can be unit tested on their own and
reused by every caller that feeds the tracker (MCP tool, dictionary handlers).

Two layers are provided:
- The core rules that the tracker always re-checks before mutating state,
  regardless of what an upstream schema already enforced.
- Strict type checking of raw tool-call arguments (camelCase keys, as
  delivered by an LLM tool loop) into a ``ThoughtData`` record.
"""

from typing import Any, Dict, Mapping, Optional

from .models import ThoughtData


# Wire name -> attribute name on ThoughtData
FIELD_NAMES = {
    "thought": "thought",
    "nextThoughtNeeded": "next_thought_needed",
    "thoughtNumber": "thought_number",
    "totalThoughts": "total_thoughts",
    "isRevision": "is_revision",
    "revisesThought": "revises_thought",
    "branchFromThought": "branch_from_thought",
    "branchId": "branch_id",
    "needsMoreThoughts": "needs_more_thoughts",
}

REQUIRED_FIELDS = ("thought", "nextThoughtNeeded", "thoughtNumber", "totalThoughts")


class InvalidInputError(ValueError):
    """Raised when a thought submission fails validation.

    ``field`` holds the wire name of the offending parameter.
    """

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"invalid {field}")


class ThoughtValidator:
    """
    Validator for sequential thinking submissions.

    Thread-safe: all methods are pure functions with no shared state.
    """

    def validate_thought_data(self, data: ThoughtData) -> None:
        """
        Apply the core submission rules in order; the first failure wins.

        Raises:
            InvalidInputError: If thought is empty or a counter is not positive
        """
        if not isinstance(data.thought, str) or data.thought == "":
            raise InvalidInputError("thought", "invalid thought: must be a string")
        if data.thought_number <= 0:
            raise InvalidInputError("thoughtNumber", "invalid thoughtNumber: must be a number > 0")
        if data.total_thoughts <= 0:
            raise InvalidInputError("totalThoughts", "invalid totalThoughts: must be a number > 0")

    def parse_arguments(self, arguments: Mapping[str, Any]) -> ThoughtData:
        """
        Build a ThoughtData record from raw tool-call arguments.

        Args:
            arguments: Mapping keyed by wire (camelCase) parameter names

        Returns:
            The typed record. Range rules are left to validate_thought_data.

        Raises:
            InvalidInputError: On missing, unknown or wrongly typed parameters
        """
        unknown = sorted(set(arguments) - set(FIELD_NAMES))
        if unknown:
            raise InvalidInputError(unknown[0], f"unknown parameter: {unknown[0]}")

        for name in REQUIRED_FIELDS:
            if name not in arguments:
                raise InvalidInputError(name, f"missing required parameter: {name}")

        values: Dict[str, Any] = {
            "thought": self.validate_string_param(arguments["thought"], "thought"),
            "next_thought_needed": self.validate_boolean_param(
                arguments["nextThoughtNeeded"], "nextThoughtNeeded"
            ),
            "thought_number": self.validate_integer_param(arguments["thoughtNumber"], "thoughtNumber"),
            "total_thoughts": self.validate_integer_param(arguments["totalThoughts"], "totalThoughts"),
        }

        for name in ("isRevision", "needsMoreThoughts"):
            value = arguments.get(name)
            if value is not None:
                values[FIELD_NAMES[name]] = self.validate_boolean_param(value, name)

        for name in ("revisesThought", "branchFromThought"):
            value = arguments.get(name)
            if value is not None:
                values[FIELD_NAMES[name]] = self.validate_integer_param(value, name)

        branch_id = arguments.get("branchId")
        if branch_id is not None:
            values["branch_id"] = self.validate_string_param(branch_id, "branchId")

        return ThoughtData(**values)

    def validate_string_param(self, value: Any, param_name: str) -> str:
        if not isinstance(value, str):
            raise InvalidInputError(param_name, f"invalid {param_name}: must be a string")
        return value

    def validate_integer_param(self, value: Any, param_name: str) -> int:
        """
        Validate an integer parameter with strict type checking.

        Booleans are rejected even though they are instances of int, and so
        are floats, including integral ones such as 2.0.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError(param_name, f"invalid {param_name}: must be an integer")
        return value

    def validate_boolean_param(self, value: Any, param_name: str) -> bool:
        if not isinstance(value, bool):
            raise InvalidInputError(
                param_name, f"invalid {param_name}: must be a boolean, got {type(value).__name__}"
            )
        return value


default_validator = ThoughtValidator()
