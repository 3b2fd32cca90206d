# consistency/statistics.py - Descriptive statistics over the stationary distribution
"""
Thread-safe descriptive statistics of the latest stationary distribution.

Cleared and refilled on every evaluation. Empty statistics report NaN
for mean/min/max/variance; a single value has variance 0.
"""

import math
import threading
from typing import Any, Dict, Iterable, List, Tuple

import numpy as np


class RunningStatistics:
    """Count, sum, mean, sample variance, min and max of recorded values."""

    def __init__(self):
        self._values: List[float] = []
        self._lock = threading.Lock()

    def add_value(self, value: float) -> None:
        with self._lock:
            self._values.append(float(value))

    def add_values(self, values: Iterable[float]) -> None:
        with self._lock:
            self._values.extend(float(v) for v in values)

    def replace(self, values: Iterable[float]) -> None:
        """Clear and record in one step, so readers never see a partial set."""
        new_values = [float(v) for v in values]
        with self._lock:
            self._values = new_values

    def clear(self) -> None:
        with self._lock:
            self._values = []

    @property
    def values(self) -> Tuple[float, ...]:
        with self._lock:
            return tuple(self._values)

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._values)

    def __len__(self):
        return self.count

    @property
    def sum(self) -> float:
        return float(np.sum(self.values))

    @property
    def mean(self) -> float:
        values = self.values
        return float(np.mean(values)) if values else math.nan

    @property
    def variance(self) -> float:
        values = self.values
        if not values:
            return math.nan
        if len(values) == 1:
            return 0.0
        return float(np.var(values, ddof=1))

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self.variance)

    @property
    def min(self) -> float:
        values = self.values
        return min(values) if values else math.nan

    @property
    def max(self) -> float:
        values = self.values
        return max(values) if values else math.nan

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for export."""
        return {
            "count": self.count,
            "sum": self.sum,
            "mean": self.mean,
            "variance": self.variance,
            "standard_deviation": self.standard_deviation,
            "min": self.min,
            "max": self.max,
        }

    def __repr__(self):
        return f"RunningStatistics(count={self.count}, mean={self.mean:.6f})"
