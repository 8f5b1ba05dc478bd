"""
Sequential Thinking Tool

A lightweight Python package that tracks dynamic, reflective problem solving
through numbered thoughts, revisions and named branches. Served as an MCP tool
by ``sequential_thinking.server``, or embedded directly in an LLM tool loop.

Usage:
    from sequential_thinking import TOOL_SPECS, SequentialThinkingServer, create_handlers

    tracker = SequentialThinkingServer()
    handlers = create_handlers(tracker)

    # Add to your LLM tools
    tools = [
        *TOOL_SPECS,
        # ... other tools
    ]

    # Handle tool calls
    if tool_name in handlers:
        result = handlers[tool_name](**tool_args)
"""

# Version info
__version__ = "0.1.0"

from .core import (
    TOOL_DESCRIPTION,
    TOOL_NAME,
    SequentialThinkingServer,
    create_handlers,
    create_sequential_thinking_handler,
    format_thought,
)
from .models import ThoughtData, ThoughtSnapshot
from .validators import InvalidInputError, ThoughtValidator

# Tool specifications compatible with Converse API format
TOOL_SPECS = [
    {
        "toolSpec": {
            "name": TOOL_NAME,
            "description": TOOL_DESCRIPTION,
            "inputSchema": {
                "json": {
                    "type": "object",
                    "properties": {
                        "thought": {
                            "type": "string",
                            "description": "Your current thinking step"
                        },
                        "nextThoughtNeeded": {
                            "type": "boolean",
                            "description": "Whether another thought step is needed"
                        },
                        "thoughtNumber": {
                            "type": "integer",
                            "description": "Current thought number (numeric value, e.g., 1, 2, 3)",
                            "minimum": 1
                        },
                        "totalThoughts": {
                            "type": "integer",
                            "description": "Estimated total thoughts needed (numeric value, e.g., 5, 10)",
                            "minimum": 1
                        },
                        "isRevision": {
                            "type": "boolean",
                            "description": "Whether this revises previous thinking"
                        },
                        "revisesThought": {
                            "type": "integer",
                            "description": "Which thought is being reconsidered",
                            "minimum": 1
                        },
                        "branchFromThought": {
                            "type": "integer",
                            "description": "Branching point thought number",
                            "minimum": 1
                        },
                        "branchId": {
                            "type": "string",
                            "description": "Branch identifier"
                        },
                        "needsMoreThoughts": {
                            "type": "boolean",
                            "description": "If more thoughts are needed"
                        }
                    },
                    "required": ["thought", "nextThoughtNeeded", "thoughtNumber", "totalThoughts"],
                    "additionalProperties": False
                }
            }
        }
    }
]

# Convenience exports
__all__ = [
    "TOOL_SPECS",
    "TOOL_NAME",
    "TOOL_DESCRIPTION",
    "SequentialThinkingServer",
    "ThoughtData",
    "ThoughtSnapshot",
    "ThoughtValidator",
    "InvalidInputError",
    "create_handlers",
    "create_sequential_thinking_handler",
    "format_thought",
]
