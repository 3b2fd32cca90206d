# ============================================================================
# consistency/filters.py - Entity projections with plugin registry
# ============================================================================
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from consistency.exceptions import ConfigurationError, FilterError
from consistency.schemas import PATH_SEPARATOR

Representation = Tuple[str, ...]


class Filter(ABC):
    """
    Projects an entity onto the part of its state that a metric compares.

    A filter may be scoped to a set of paths; only literals equal to a
    path, or nested below one, are kept. No paths means no scoping.
    Projections are deterministic: literals are returned sorted.
    """
    _filters: Dict[str, Callable[..., "Filter"]] = {}

    def __init__(self, paths: Optional[Iterable[str]] = None):
        if isinstance(paths, str):
            paths = [paths]
        self.paths = frozenset(
            p.strip(PATH_SEPARATOR) for p in (paths or []) if p.strip(PATH_SEPARATOR)
        )

    @classmethod
    def register(cls, name: str):
        def decorator(factory: Callable[..., "Filter"]):
            cls._filters[name] = factory
            return factory
        return decorator

    @classmethod
    def create(cls, name: str, paths: Optional[Iterable[str]] = None) -> "Filter":
        if name not in cls._filters:
            raise ConfigurationError(f"Unknown filter: {name}. Available: {cls.available()}")
        return cls._filters[name](paths)

    @classmethod
    def available(cls) -> List[str]:
        return sorted(cls._filters)

    def matches(self, literal: str) -> bool:
        """True if the literal falls under one of the scoping paths."""
        if not self.paths:
            return True
        return any(
            literal == path or literal.startswith(path + PATH_SEPARATOR)
            for path in self.paths
        )

    def apply(self, entity: Any) -> Representation:
        return tuple(sorted(
            literal for literal in self.literals(entity) if self.matches(literal)
        ))

    def __call__(self, entity: Any) -> Representation:
        return self.apply(entity)

    @abstractmethod
    def literals(self, entity: Any) -> Iterable[str]:
        """Unscoped literals of the sub-state this filter projects."""

    @staticmethod
    def _state(entity: Any, attribute: str) -> Iterable[str]:
        try:
            return getattr(entity, attribute)
        except AttributeError:
            raise FilterError(
                f"{type(entity).__name__} exposes no '{attribute}' state to filter"
            ) from None

    def __repr__(self):
        return f"{type(self).__name__}(paths={sorted(self.paths)})"


@Filter.register("belief")
class BeliefFilter(Filter):
    """Belief-only state."""

    def literals(self, entity: Any) -> Iterable[str]:
        return self._state(entity, "beliefs")


@Filter.register("plan")
class PlanFilter(Filter):
    """Plan/goal-only state."""

    def literals(self, entity: Any) -> Iterable[str]:
        return self._state(entity, "plans")


@Filter.register("all")
class AllFilter(Filter):
    """All observable state: beliefs followed by plans."""

    def literals(self, entity: Any) -> Iterable[str]:
        return list(self._state(entity, "beliefs")) + list(self._state(entity, "plans"))
