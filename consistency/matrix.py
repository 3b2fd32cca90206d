# consistency/matrix.py - Dissimilarity transition matrix construction
"""
Builds the Markov chain transition matrix from pairwise distances.

For an ordered list of n entities the builder:
1. Projects every entity once through the filter.
2. Fills the upper triangle with metric distances in parallel and mirrors
   each value into the lower triangle (symmetric by construction).
3. After all cells are filled, divides every row by its 1-norm. Rows with
   a zero norm stay all-zero.
4. Sets the diagonal to epsilon. The self-loop keeps the chain aperiodic
   so the dominant eigenvector is unique and of consistent sign.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Optional, Sequence
import logging

import numpy as np

from consistency.filters import Filter
from consistency.metrics import Metric

logger = logging.getLogger(__name__)


def is_degenerate(matrix: np.ndarray) -> bool:
    """
    True if the matrix carries no off-diagonal mass.

    Same as a total of at most n * epsilon, since every normalized nonzero
    row sums to 1, but tested on the cells so that rounding in a sum of n
    epsilons cannot flip the result.
    """
    off_diagonal = matrix[~np.eye(matrix.shape[0], dtype=bool)]
    return not np.any(off_diagonal)


class TransitionMatrixBuilder:
    """Assembles the n x n transition matrix using metric(filter(a), filter(b))."""

    def __init__(
        self,
        metric: Metric,
        entity_filter: Filter,
        epsilon: float,
        max_workers: Optional[int] = None,
    ):
        self.metric = metric
        self.filter = entity_filter
        self.epsilon = epsilon
        self.max_workers = max_workers

    def build(self, entities: Sequence[Any]) -> np.ndarray:
        """
        Build the transition matrix for entities in the given order.

        Args:
            entities: Entity snapshot; index i of the matrix is entities[i]

        Returns:
            Row-normalized matrix with epsilon on the diagonal

        Raises:
            MetricContractError: If the metric returns an invalid distance
        """
        n = len(entities)
        representations = [self.filter.apply(entity) for entity in entities]
        matrix = np.zeros((n, n), dtype=float)

        def fill_row(i: int) -> None:
            # Row i owns cells (i, j) and (j, i) for j > i, so rows never overlap
            for j in range(i + 1, n):
                if entities[i] == entities[j]:
                    value = 0.0
                else:
                    value = self.metric.apply(representations[i], representations[j])
                matrix[i, j] = value
                matrix[j, i] = value

        if self.max_workers == 1 or n < 3:
            for i in range(n - 1):
                fill_row(i)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(fill_row, i) for i in range(n - 1)]
                for future in as_completed(futures):
                    future.result()

        # All cells are filled at this point; rows can be normalized
        norms = np.abs(matrix).sum(axis=1)
        nonzero = norms != 0
        matrix[nonzero] /= norms[nonzero, np.newaxis]
        np.fill_diagonal(matrix, self.epsilon)

        logger.debug(
            f"Built {n}x{n} transition matrix ({int((~nonzero).sum())} zero rows)"
        )
        return matrix
