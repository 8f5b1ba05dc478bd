"""
Data records exchanged with the thought tracker.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass
class ThoughtData:
    """A single submitted step of a reasoning sequence."""
    thought: str
    thought_number: int
    total_thoughts: int
    next_thought_needed: bool
    is_revision: bool = False
    revises_thought: Optional[int] = None
    branch_from_thought: Optional[int] = None
    branch_id: Optional[str] = None
    needs_more_thoughts: bool = False

    @property
    def is_branch(self) -> bool:
        """True when this thought opens or continues a named branch.

        Requires a positive branch point and a non-empty branch id.
        """
        return (
            self.branch_from_thought is not None
            and self.branch_from_thought > 0
            and bool(self.branch_id)
        )


@dataclass(frozen=True)
class ThoughtSnapshot:
    """Tracker state as of the moment a submission was recorded."""
    thought_number: int
    total_thoughts: int
    next_thought_needed: bool
    branches: Tuple[str, ...] = field(default_factory=tuple)
    thought_history_length: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "thoughtNumber": self.thought_number,
            "totalThoughts": self.total_thoughts,
            "nextThoughtNeeded": self.next_thought_needed,
            "branches": list(self.branches),
            "thoughtHistoryLength": self.thought_history_length,
        }
