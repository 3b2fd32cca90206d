# consistency/__init__.py - Markov chain consistency scoring
"""
Consistency scoring for groups of agents in a multi-agent runtime.

This module provides tools for:
- Projecting agent state through filters (all, belief-only, plan-only)
- Measuring pairwise dissimilarity with pluggable metrics
- Building a dissimilarity-driven Markov chain transition matrix
- Solving its stationary distribution exactly or by power iteration
- Tracking per-agent consistency/inconsistency and aggregate statistics

The key insight: an agent unlike the rest of the group absorbs more of
the random walk, so its stationary probability measures inconsistency.
"""

from consistency.config import Algorithm, ConsistencyConfig
from consistency.engine import ConsistencyEngine
from consistency.exceptions import (
    ConfigurationError,
    ConsistencyError,
    FilterError,
    MetricContractError,
)
from consistency.filters import AllFilter, BeliefFilter, Filter, PlanFilter
from consistency.matrix import TransitionMatrixBuilder, is_degenerate
from consistency.metrics import (
    DiscreteDistance,
    LevenshteinDistance,
    Metric,
    NormalizedCompressionDistance,
    SymmetricDifferenceDistance,
    WeightedDifferenceDistance,
)
from consistency.schemas import DEFAULT_SCORE, Agent, ScoreEntry
from consistency.solver import ExactSolver, PowerIterationSolver, create_solver
from consistency.statistics import RunningStatistics

__all__ = [
    "Agent",
    "AllFilter",
    "Algorithm",
    "BeliefFilter",
    "ConfigurationError",
    "ConsistencyConfig",
    "ConsistencyEngine",
    "ConsistencyError",
    "DEFAULT_SCORE",
    "DiscreteDistance",
    "ExactSolver",
    "Filter",
    "FilterError",
    "LevenshteinDistance",
    "Metric",
    "MetricContractError",
    "NormalizedCompressionDistance",
    "PlanFilter",
    "PowerIterationSolver",
    "RunningStatistics",
    "ScoreEntry",
    "SymmetricDifferenceDistance",
    "TransitionMatrixBuilder",
    "WeightedDifferenceDistance",
    "create_solver",
    "is_degenerate",
]
