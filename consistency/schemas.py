# consistency/schemas.py - Entity references and score records
"""
Data structures shared by the consistency engine.

Key concepts:
- Agent: reference entity tracked by the engine. Identity is the agent_id,
  so beliefs and plans may change between evaluations without changing
  which score entry the agent maps to.
- ScoreEntry: (consistency, inconsistency) pair stored per tracked entity.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple


PATH_SEPARATOR = "/"


class ScoreEntry(NamedTuple):
    """Consistency and inconsistency of one entity, both in [0, 1]."""
    consistency: float
    inconsistency: float


# Full consistency is assumed for entities without computed data
DEFAULT_SCORE = ScoreEntry(consistency=1.0, inconsistency=0.0)


@dataclass
class Agent:
    """
    An agent whose observable state is compared against the group.

    Literals are path-like strings, e.g. "first/sub1" lives under the
    path "first". Duplicates are allowed and count as multiplicity.
    """
    agent_id: str
    beliefs: List[str] = field(default_factory=list)
    plans: List[str] = field(default_factory=list)

    def __hash__(self):
        return hash(self.agent_id)

    def __eq__(self, other):
        if not isinstance(other, Agent):
            return NotImplemented
        return self.agent_id == other.agent_id

    def believe(self, *literals: str) -> "Agent":
        """Add belief literals, returns self for chaining."""
        self.beliefs.extend(literals)
        return self

    def forget(self, *literals: str) -> "Agent":
        """Remove one occurrence of each given belief literal if present."""
        for literal in literals:
            if literal in self.beliefs:
                self.beliefs.remove(literal)
        return self

    def intend(self, *literals: str) -> "Agent":
        """Add plan/goal literals, returns self for chaining."""
        self.plans.extend(literals)
        return self

    def __repr__(self):
        return f"Agent({self.agent_id!r}, beliefs={len(self.beliefs)}, plans={len(self.plans)})"
