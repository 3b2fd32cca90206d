# ============================================================================
# consistency/solver.py - Stationary distribution strategies
# ============================================================================
"""
Dominant left eigenvector of the transition matrix.

The matrix is row-stochastic (plus the epsilon diagonal), so the
stationary distribution is the vector pi with pi @ P = pi. Both
strategies finish the same way: divide by the 1-norm, then take the
absolute value so the arbitrary eigenvector sign never leaks out.
"""
from abc import ABC, abstractmethod
from typing import Optional, Union
import logging

import numpy as np
from scipy.linalg import eig

from consistency.config import Algorithm, ConsistencyConfig
from consistency.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def normalize_distribution(vector: np.ndarray) -> np.ndarray:
    """Scale to unit 1-norm and make nonnegative. A zero vector stays zero."""
    norm = float(np.abs(vector).sum())
    if norm == 0:
        return np.zeros_like(vector, dtype=float)
    return np.abs(vector / norm)


class StationarySolver(ABC):
    """Strategy interface for computing the stationary distribution."""

    algorithm: Algorithm

    @abstractmethod
    def dominant_eigenvector(self, matrix: np.ndarray) -> np.ndarray:
        """Unnormalized dominant left eigenvector."""

    def solve(self, matrix: np.ndarray) -> np.ndarray:
        return normalize_distribution(self.dominant_eigenvector(matrix))

    def __call__(self, matrix: np.ndarray) -> np.ndarray:
        return self.solve(matrix)


class ExactSolver(StationarySolver):
    """Full eigendecomposition, O(n^3)."""

    algorithm = Algorithm.EXACT

    def dominant_eigenvector(self, matrix: np.ndarray) -> np.ndarray:
        eigenvalues, left_vectors = eig(matrix, left=True, right=False)
        real_values = eigenvalues.real

        # Strict improvement only: ties keep the lowest index
        best = 0
        for index in range(1, len(real_values)):
            if real_values[index] > real_values[best]:
                best = index

        logger.debug(f"Dominant eigenvalue {real_values[best]:.6f} at index {best}")
        return left_vectors[:, best].real

    def __repr__(self):
        return "ExactSolver()"


class PowerIterationSolver(StationarySolver):
    """
    Power method with a fixed number of iterations, O(n^2 k).

    There is no convergence check. The start vector is drawn from
    ``random_state`` (or a generator seeded with ``seed``); pass either
    to make results reproducible.
    """

    algorithm = Algorithm.ITERATIVE

    def __init__(
        self,
        iterations: int,
        seed: Optional[int] = None,
        random_state: Optional[np.random.Generator] = None,
    ):
        if iterations < 1:
            raise ConfigurationError(f"iterations must be >= 1, got {iterations}")
        self.iterations = iterations
        self.random_state = random_state if random_state is not None else np.random.default_rng(seed)

    def dominant_eigenvector(self, matrix: np.ndarray) -> np.ndarray:
        vector = self.random_state.random(matrix.shape[0])
        for _ in range(self.iterations):
            vector = vector @ matrix
            norm = np.linalg.norm(vector)
            if norm == 0:
                break
            vector = vector / norm
        return vector

    def __repr__(self):
        return f"PowerIterationSolver(iterations={self.iterations})"


def create_solver(
    algorithm: Union[Algorithm, str],
    iterations: int = 1,
    seed: Optional[int] = None,
    random_state: Optional[np.random.Generator] = None,
) -> StationarySolver:
    """
    Build the solver strategy for an algorithm.

    Raises:
        ConfigurationError: If the algorithm is not one of Algorithm
    """
    try:
        algorithm = Algorithm(algorithm)
    except ValueError:
        raise ConfigurationError(
            f"Unknown algorithm: {algorithm}. Available: {[a.value for a in Algorithm]}"
        ) from None

    if algorithm is Algorithm.EXACT:
        return ExactSolver()
    return PowerIterationSolver(iterations, seed=seed, random_state=random_state)


def solver_from_config(
    config: ConsistencyConfig,
    random_state: Optional[np.random.Generator] = None,
) -> StationarySolver:
    """Solver for a validated config; random_state overrides the configured seed."""
    return create_solver(
        config.algorithm, config.iterations, seed=config.seed, random_state=random_state
    )
