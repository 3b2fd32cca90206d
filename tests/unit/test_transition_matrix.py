"""
Unit Tests: Transition matrix construction

Tests TransitionMatrixBuilder and the degeneracy check:
- Row normalization and epsilon diagonal
- Sequential and parallel fills agree
- Self-distance shortcut and metric call count
- Degenerate (all-zero) matrices
- Metric contract violations propagate out of the build
"""

import threading

import numpy as np
import pytest

from consistency.exceptions import MetricContractError
from consistency.filters import BeliefFilter
from consistency.matrix import TransitionMatrixBuilder, is_degenerate
from consistency.metrics import DiscreteDistance, Metric
from consistency.schemas import Agent

EPSILON = 0.001


class PositionDistance(Metric):
    """Agents carry a single numeric belief; distance is the gap between them."""

    def __init__(self):
        self.calls = 0
        self._lock = threading.Lock()

    def distance(self, first, second):
        with self._lock:
            self.calls += 1
        return abs(float(first[0]) - float(second[0]))


class NegativeDistance(Metric):
    def distance(self, first, second):
        return -1.0


def positioned(*positions):
    return [Agent(f"p{i}", beliefs=[str(p)]) for i, p in enumerate(positions)]


class TestMatrixShape:
    """Normalization and diagonal."""

    def test_known_matrix(self):
        """Distances 1, 3, 2 between positions 0, 1, 3."""
        builder = TransitionMatrixBuilder(PositionDistance(), BeliefFilter(), EPSILON, max_workers=1)
        matrix = builder.build(positioned(0, 1, 3))

        expected = np.array([
            [EPSILON, 1 / 4, 3 / 4],
            [1 / 3, EPSILON, 2 / 3],
            [3 / 5, 2 / 5, EPSILON],
        ])
        np.testing.assert_allclose(matrix, expected)

    def test_rows_are_probabilities(self):
        builder = TransitionMatrixBuilder(PositionDistance(), BeliefFilter(), EPSILON, max_workers=1)
        matrix = builder.build(positioned(0, 2, 5, 9))

        off_diagonal = matrix - np.diag(np.diag(matrix))
        np.testing.assert_allclose(off_diagonal.sum(axis=1), np.ones(4))
        np.testing.assert_allclose(np.diag(matrix), np.full(4, EPSILON))
        assert (matrix >= 0).all()

    def test_zero_distance_pairs(self):
        """Agents at distance 0 from each other put all mass on the third."""
        agents = [Agent("a", ["x"]), Agent("b", ["x"]), Agent("c", ["y"])]
        builder = TransitionMatrixBuilder(DiscreteDistance(), BeliefFilter(), EPSILON, max_workers=1)
        matrix = builder.build(agents)

        # a and b are at distance 0 from each other and 1 from c
        np.testing.assert_allclose(matrix[0], [EPSILON, 0.0, 1.0])
        np.testing.assert_allclose(matrix[2], [0.5, 0.5, EPSILON])

    def test_two_entities(self):
        builder = TransitionMatrixBuilder(PositionDistance(), BeliefFilter(), EPSILON)
        matrix = builder.build(positioned(0, 4))
        np.testing.assert_allclose(matrix, [[EPSILON, 1.0], [1.0, EPSILON]])


class TestParallelFill:
    """Thread pool fill over upper-triangular rows."""

    def test_parallel_matches_sequential(self):
        agents = positioned(0, 1, 3, 7, 8, 15, 21, 22)
        sequential = TransitionMatrixBuilder(PositionDistance(), BeliefFilter(), EPSILON, max_workers=1)
        parallel = TransitionMatrixBuilder(PositionDistance(), BeliefFilter(), EPSILON, max_workers=4)

        np.testing.assert_array_equal(sequential.build(agents), parallel.build(agents))

    def test_each_pair_measured_once(self):
        metric = PositionDistance()
        builder = TransitionMatrixBuilder(metric, BeliefFilter(), EPSILON, max_workers=3)
        builder.build(positioned(*range(6)))
        assert metric.calls == 15  # 6 choose 2

    def test_same_entity_not_measured(self):
        """Equal entities are at distance 0 without calling the metric."""
        a, b = positioned(0, 5)
        metric = PositionDistance()
        builder = TransitionMatrixBuilder(metric, BeliefFilter(), EPSILON, max_workers=1)
        matrix = builder.build([a, a, b])

        assert metric.calls == 2
        assert matrix[0, 1] == 0.0 and matrix[1, 0] == 0.0

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_contract_violation_propagates(self, max_workers):
        builder = TransitionMatrixBuilder(NegativeDistance(), BeliefFilter(), EPSILON, max_workers)
        with pytest.raises(MetricContractError):
            builder.build(positioned(0, 1, 2, 3))


class TestDegeneracy:
    """All-zero dissimilarity detection."""

    def test_identical_agents_degenerate(self):
        agents = [Agent(name, ["same"]) for name in "abc"]
        builder = TransitionMatrixBuilder(DiscreteDistance(), BeliefFilter(), EPSILON)
        matrix = builder.build(agents)

        np.testing.assert_allclose(matrix, np.eye(3) * EPSILON)
        assert is_degenerate(matrix)

    def test_distinct_agents_not_degenerate(self):
        builder = TransitionMatrixBuilder(PositionDistance(), BeliefFilter(), EPSILON)
        assert not is_degenerate(builder.build(positioned(0, 1, 3)))
