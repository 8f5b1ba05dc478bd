"""
Sequential Thinking Tool - Core Implementation
"""
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple
import bisect
import json
import logging
import sys
import threading
import unicodedata

from .models import ThoughtData, ThoughtSnapshot
from .validators import InvalidInputError, ThoughtValidator, default_validator


logger = logging.getLogger(__name__)

TOOL_NAME = "sequentialthinking"

TOOL_DESCRIPTION = """A detailed tool for dynamic and reflective problem-solving through thoughts.
This tool helps analyze problems through a flexible thinking process that can adapt and evolve.
Each thought can build on, question, or revise previous insights as understanding deepens.

When to use this tool:
- Breaking down complex problems into steps
- Planning and design with room for revision
- Analysis that might need course correction
- Problems where the full scope might not be clear initially
- Problems that require a multi-step solution
- Tasks that need to maintain context over multiple steps
- Situations where irrelevant information needs to be filtered out

Key features:
- You can adjust totalThoughts up or down as you progress
- You can question or revise previous thoughts
- You can add more thoughts even after reaching what seemed like the end
- You can express uncertainty and explore alternative approaches
- Not every thought needs to build linearly - you can branch or backtrack
- Generates a solution hypothesis
- Verifies the hypothesis based on the Chain of Thought steps
- Repeats the process until satisfied
- Provides a correct answer

Parameters explained:
- thought (string): Required. Your current thinking step, which can include:
  * Regular analytical steps
  * Revisions of previous thoughts
  * Questions about previous decisions
  * Realizations about needing more analysis
  * Changes in approach
  * Hypothesis generation
  * Hypothesis verification
- nextThoughtNeeded (boolean): Required. True if you need more thinking, even if at what seemed like the end
- thoughtNumber (integer): Required. Current number in sequence (can go beyond initial total if needed)
- totalThoughts (integer): Required. Current estimate of thoughts needed (can be adjusted up/down)
- isRevision (boolean): Optional. A boolean indicating if this thought revises previous thinking
- revisesThought (integer): Optional. If isRevision is true, which thought number is being reconsidered
- branchFromThought (integer): Optional. If branching, which thought number is the branching point
- branchId (string): Optional. Identifier for the current branch (if any)
- needsMoreThoughts (boolean): Optional. If reaching end but realizing more thoughts needed

You should:
1. Start with an initial estimate of needed thoughts, but be ready to adjust
2. Feel free to question or revise previous thoughts
3. Don't hesitate to add more thoughts if needed, even at the "end"
4. Express uncertainty when present
5. Mark thoughts that revise previous thinking or branch into new paths
6. Ignore information that is irrelevant to the current step
7. Generate a solution hypothesis when appropriate
8. Verify the hypothesis based on the Chain of Thought steps
9. Repeat the process until satisfied with the solution
10. Provide a single, ideally correct answer as the final output
11. Only set nextThoughtNeeded to false when truly done and a satisfactory answer is reached"""

# ANSI colours for the thought frame header
YELLOW = "\033[33m"
GREEN = "\033[32m"
BLUE = "\033[34m"
RESET = "\033[0m"


class SequentialThinkingServer:
    """
    Thread-safe tracker for a sequence of reasoning steps.

    Keeps the number of accepted thoughts and the sorted set of known branch
    identifiers. Instances are independent; the entry point creates one and
    passes it to whatever invokes the tool.
    """

    def __init__(self, enable_thought_logging: bool = False,
                 diagnostic_stream: Optional[TextIO] = None,
                 validator: Optional[ThoughtValidator] = None):
        """
        Args:
            enable_thought_logging: Write a boxed frame per accepted thought
            diagnostic_stream: Where frames go. Defaults to sys.stderr at write time.
            validator: Validator to use. If None, uses the module default.
        """
        self.enable_thought_logging = enable_thought_logging
        self.diagnostic_stream = diagnostic_stream
        self.validator = validator or default_validator

        self._history_length = 0
        self._branch_ids: List[str] = []
        self._known_branches = set()
        self._lock = threading.Lock()

    @property
    def thought_history_length(self) -> int:
        with self._lock:
            return self._history_length

    @property
    def branches(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._branch_ids)

    def process_thought(self, data: ThoughtData) -> ThoughtSnapshot:
        """
        Validate a thought, record it and return a snapshot of the tracker.

        Raises:
            InvalidInputError: If validation fails. Nothing is recorded.
        """
        self.validator.validate_thought_data(data)

        total_thoughts = max(data.total_thoughts, data.thought_number)

        with self._lock:
            self._history_length += 1
            if data.is_branch:
                self._register_branch(data.branch_id)
            branches = tuple(self._branch_ids)
            history_length = self._history_length

        if self.enable_thought_logging:
            self._write_frame(data, total_thoughts)

        return ThoughtSnapshot(
            thought_number=data.thought_number,
            total_thoughts=total_thoughts,
            next_thought_needed=data.next_thought_needed,
            branches=branches,
            thought_history_length=history_length,
        )

    def _register_branch(self, branch_id: str) -> None:
        # Caller holds self._lock
        if branch_id in self._known_branches:
            return
        self._known_branches.add(branch_id)
        self._branch_ids.insert(bisect.bisect_left(self._branch_ids, branch_id), branch_id)

    def _write_frame(self, data: ThoughtData, total_thoughts: int) -> None:
        stream = self.diagnostic_stream or sys.stderr
        try:
            print(format_thought(data, total_thoughts), file=stream, flush=True)
        except (OSError, ValueError) as e:
            logger.warning("Failed to write thought frame: %s: %s", type(e).__name__, e)


def display_width(text: str) -> int:
    """Terminal columns taken by text; wide and fullwidth characters count twice."""
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text)


def format_thought(data: ThoughtData, total_thoughts: Optional[int] = None) -> str:
    """
    Render a thought as a boxed frame for the diagnostic stream.

    Layout is computed on the uncoloured header so the borders line up.
    """
    total = total_thoughts if total_thoughts is not None else data.total_thoughts

    if data.is_revision:
        prefix, color = "🔄 Revision", YELLOW
        context = f" (revising thought {data.revises_thought})" if data.revises_thought else ""
    elif data.is_branch:
        prefix, color = "🌿 Branch", GREEN
        context = f" (from thought {data.branch_from_thought}, ID: {data.branch_id})"
    else:
        prefix, color = "💭 Thought", BLUE
        context = ""

    header = f"{prefix} {data.thought_number}/{total}{context}"
    colored_header = header.replace(prefix, f"{color}{prefix}{RESET}", 1)

    header_width = display_width(header)
    thought_width = display_width(data.thought)
    width = max(header_width, thought_width) + 4
    border = "─" * width

    return "\n".join([
        "",
        f"┌{border}┐",
        f"│ {colored_header}{' ' * (width - header_width - 2)} │",
        f"├{border}┤",
        f"│ {data.thought}{' ' * (width - thought_width - 2)} │",
        f"└{border}┘",
    ])


def safe_json_dumps(data: Any) -> str:
    """
    Serialize a tool response to compact JSON.

    Never raises; unserializable data yields a generic error object so the
    internal structure is not disclosed.
    """
    try:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        logger.error("Failed to serialize tool response: %s", type(e).__name__)
        return json.dumps({"status": "error", "message": "Data processing failed"})


def create_sequential_thinking_handler(server: SequentialThinkingServer,
                                       validator: Optional[ThoughtValidator] = None) -> Callable[..., str]:
    """
    Create a sequentialthinking handler bound to the given tracker.

    Args:
        server: Tracker that records the thoughts
        validator: Validator for raw arguments. If None, uses the tracker's.

    Returns:
        Handler function taking wire-named keyword arguments and returning JSON
    """
    argument_validator = validator or server.validator

    def handler(**kwargs) -> str:
        try:
            data = argument_validator.parse_arguments(kwargs)
            snapshot = server.process_thought(data)
        except InvalidInputError as e:
            return safe_json_dumps({"status": "error", "message": str(e), "field": e.field})
        return safe_json_dumps(snapshot.to_dict())
    return handler


def create_handlers(server: SequentialThinkingServer) -> Dict[str, Callable[..., str]]:
    """Get the tool handler mapping bound to a tracker."""
    return {
        TOOL_NAME: create_sequential_thinking_handler(server),
    }
