# consistency/engine.py - Markov chain consistency engine
"""
Consistency scoring for a dynamic group of agents.

Pairwise dissimilarity between agents is turned into a random walk: each
row of the transition matrix holds the normalized distances from one
agent to all others. Agents that differ from the group attract more of
the walk, so their stationary probability is read as inconsistency and
the rescaled complement as consistency.

The hosting runtime owns the agents and decides when to call evaluate();
between evaluations scores stay as computed, and agents without computed
data report full consistency (1.0, 0.0).
"""

from typing import Any, Hashable, Iterator, Optional, Tuple
import logging
import threading

import numpy as np

from consistency.config import (
    DEFAULT_EPSILON,
    DEFAULT_ITERATIONS,
    Algorithm,
    ConsistencyConfig,
)
from consistency.filters import BeliefFilter, Filter
from consistency.matrix import TransitionMatrixBuilder, is_degenerate
from consistency.metrics import Metric, NormalizedCompressionDistance
from consistency.schemas import DEFAULT_SCORE, ScoreEntry
from consistency.solver import StationarySolver, solver_from_config
from consistency.statistics import RunningStatistics
from consistency.store import ScoreStore

logger = logging.getLogger(__name__)


class ConsistencyEngine:
    """
    Tracks entities and scores their consistency relative to the group.

    Args:
        entity_filter: Projection applied to each entity (default: beliefs)
        metric: Pairwise distance (default: normalized compression distance)
        config: Algorithm, iterations, epsilon, seed and worker settings
        random_state: Optional numpy Generator for the power method start vector
    """

    def __init__(
        self,
        entity_filter: Optional[Filter] = None,
        metric: Optional[Metric] = None,
        config: Optional[ConsistencyConfig] = None,
        random_state: Optional[np.random.Generator] = None,
    ):
        self.config = config or ConsistencyConfig()
        self._filter = entity_filter or BeliefFilter()
        self._metric = metric or NormalizedCompressionDistance()
        self._solver: StationarySolver = solver_from_config(self.config, random_state)
        self._builder = TransitionMatrixBuilder(
            self._metric, self._filter, self.config.epsilon, self.config.max_workers
        )
        self._store = ScoreStore()
        self._statistics = RunningStatistics()
        self._evaluate_lock = threading.Lock()

        logger.info(
            f"Consistency engine: algorithm={self.config.algorithm.value}, "
            f"metric={self._metric!r}, filter={self._filter!r}"
        )

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def numeric(
        cls,
        entity_filter: Optional[Filter] = None,
        metric: Optional[Metric] = None,
        epsilon: float = DEFAULT_EPSILON,
    ) -> "ConsistencyEngine":
        """Engine using the exact eigendecomposition."""
        config = ConsistencyConfig.from_dict({"algorithm": Algorithm.EXACT, "epsilon": epsilon})
        return cls(entity_filter, metric, config)

    @classmethod
    def heuristic(
        cls,
        entity_filter: Optional[Filter] = None,
        metric: Optional[Metric] = None,
        iterations: int = DEFAULT_ITERATIONS,
        epsilon: float = DEFAULT_EPSILON,
        seed: Optional[int] = None,
    ) -> "ConsistencyEngine":
        """Engine using the power method with a fixed iteration count."""
        config = ConsistencyConfig.from_dict({
            "algorithm": Algorithm.ITERATIVE,
            "iterations": iterations,
            "epsilon": epsilon,
            "seed": seed,
        })
        return cls(entity_filter, metric, config)

    @classmethod
    def from_config(cls, config: ConsistencyConfig) -> "ConsistencyEngine":
        """Engine with metric and filter resolved by registry name."""
        return cls(Filter.create(config.filter), Metric.create(config.metric), config)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def metric(self) -> Metric:
        return self._metric

    @property
    def filter(self) -> Filter:
        return self._filter

    @property
    def solver(self) -> StationarySolver:
        return self._solver

    def add(self, *entities: Hashable) -> "ConsistencyEngine":
        """Track entities with the default score; already tracked ones keep theirs."""
        for entity in entities:
            self._store.add(entity)
        return self

    def remove(self, *entities: Hashable) -> "ConsistencyEngine":
        """Stop tracking entities; unknown entities are ignored."""
        for entity in entities:
            self._store.remove(entity)
        return self

    def clear(self) -> "ConsistencyEngine":
        """Forget all entities and statistics."""
        with self._evaluate_lock:
            self._statistics.clear()
            self._store.clear()
        return self

    def __contains__(self, entity: Hashable) -> bool:
        return entity in self._store

    def __len__(self):
        return len(self._store)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self) -> "ConsistencyEngine":
        """
        Recompute scores for all tracked entities.

        Fewer than two entities leaves scores unchanged. A matrix without
        off-diagonal mass resets every entity to the default score.

        Returns:
            self, for chaining

        Raises:
            MetricContractError: If the metric returns an invalid distance;
                stored scores are left untouched
        """
        with self._evaluate_lock:
            entities = self._store.snapshot()
            if len(entities) < 2:
                logger.debug(f"Skipping evaluation: {len(entities)} tracked entities")
                return self

            matrix = self._builder.build(entities)
            if is_degenerate(matrix):
                logger.warning(
                    f"All {len(entities)} entities are indistinguishable, using default scores"
                )
                stationary = np.zeros(len(entities))
            else:
                stationary = self._solver.solve(matrix)

            norm = float(np.abs(stationary).sum())
            if norm == 0:
                scores = {entity: DEFAULT_SCORE for entity in entities}
            else:
                consistency = (1.0 - stationary) / norm
                scores = {
                    entity: ScoreEntry(float(consistency[i]), float(stationary[i]))
                    for i, entity in enumerate(entities)
                }

            self._statistics.replace(stationary)
            written = self._store.update_tracked(scores)

            logger.debug(
                f"Evaluated {len(entities)} entities with {self._solver!r}, "
                f"stored {written} scores, max inconsistency {float(stationary.max()):.4f}"
            )
        return self

    def __call__(self) -> "ConsistencyEngine":
        return self.evaluate()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def score(self, entity: Hashable) -> ScoreEntry:
        """Stored (consistency, inconsistency) pair, default for unknown entities."""
        return self._store.get(entity)

    def consistency(self, entity: Any = None):
        """
        Consistency of one entity, or of all tracked entities.

        With an entity, returns its value (1.0 if unknown). Without one,
        returns a lazy iterator of (entity, consistency) pairs.
        """
        if entity is None:
            return self._stream(0)
        return self._store.get(entity).consistency

    def inconsistency(self, entity: Any = None):
        """
        Inconsistency of one entity, or of all tracked entities.

        With an entity, returns its value (0.0 if unknown). Without one,
        returns a lazy iterator of (entity, inconsistency) pairs.
        """
        if entity is None:
            return self._stream(1)
        return self._store.get(entity).inconsistency

    def _stream(self, index: int) -> Iterator[Tuple[Hashable, float]]:
        return ((entity, entry[index]) for entity, entry in self._store.items())

    def statistics(self) -> RunningStatistics:
        """Descriptive statistics of the latest stationary distribution."""
        return self._statistics

    def __repr__(self):
        return f"ConsistencyEngine({self._solver!r}, {self._store!r})"
