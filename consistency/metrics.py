# ============================================================================
# consistency/metrics.py - Pairwise distances with plugin registry
# ============================================================================
import bz2
import logging
import lzma
import math
import zlib
from abc import ABC, abstractmethod
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional

from consistency.exceptions import ConfigurationError, MetricContractError

logger = logging.getLogger(__name__)

SERIALIZATION_SEPARATOR = "\n"

COMPRESSORS: Dict[str, Callable[[bytes], bytes]] = {
    "zlib": lambda data: zlib.compress(data, 9),
    "bz2": lambda data: bz2.compress(data, 9),
    "lzma": lzma.compress,
}


def serialize(representation: Iterable) -> str:
    """Canonical string form of a representation: sorted elements, one per line."""
    return SERIALIZATION_SEPARATOR.join(sorted(str(item) for item in representation))


class Metric(ABC):
    """
    Symmetric, nonnegative distance between two representations.

    Subclasses implement ``distance``; ``apply`` enforces the contract so a
    negative, NaN or infinite value never reaches the transition matrix.
    """
    _metrics: Dict[str, Callable[..., "Metric"]] = {}

    @classmethod
    def register(cls, name: str):
        def decorator(factory: Callable[..., "Metric"]):
            cls._metrics[name] = factory
            return factory
        return decorator

    @classmethod
    def create(cls, name: str, **kwargs) -> "Metric":
        if name not in cls._metrics:
            raise ConfigurationError(f"Unknown metric: {name}. Available: {cls.available()}")
        return cls._metrics[name](**kwargs)

    @classmethod
    def available(cls) -> List[str]:
        return sorted(cls._metrics)

    @abstractmethod
    def distance(self, first, second) -> float:
        """Raw distance between two representations."""

    def apply(self, first, second) -> float:
        value = float(self.distance(first, second))
        if not math.isfinite(value) or value < 0:
            logger.warning(f"{type(self).__name__} returned invalid distance {value}")
            raise MetricContractError(
                f"{type(self).__name__} must return a finite nonnegative distance, got {value}"
            )
        return value

    def __call__(self, first, second) -> float:
        return self.apply(first, second)

    def __repr__(self):
        return f"{type(self).__name__}()"


@Metric.register("discrete")
class DiscreteDistance(Metric):
    """0 if both representations hold the same elements, 1 otherwise."""

    def distance(self, first, second) -> float:
        return 0.0 if set(first) == set(second) else 1.0


@Metric.register("symmetric_difference")
class SymmetricDifferenceDistance(Metric):
    """
    Size of the symmetric set difference.

    With ``normalize=True`` the size is divided by the size of the union,
    which is the Jaccard distance (0 for equal sets, 1 for disjoint ones).
    """

    def __init__(self, normalize: bool = False):
        self.normalize = normalize

    def distance(self, first, second) -> float:
        first, second = set(first), set(second)
        difference = len(first ^ second)
        if not self.normalize:
            return float(difference)

        union = first | second
        return difference / len(union) if union else 0.0

    def __repr__(self):
        return f"SymmetricDifferenceDistance(normalize={self.normalize})"


@Metric.register("weighted_difference")
class WeightedDifferenceDistance(Metric):
    """
    Multiset symmetric difference: for every element, the absolute
    difference of its multiplicities, scaled by the element's weight.

    Args:
        weights: Optional callable mapping an element to its weight (default 1.0)
    """

    def __init__(self, weights: Optional[Callable[[str], float]] = None):
        self.weights = weights

    def distance(self, first, second) -> float:
        first, second = Counter(first), Counter(second)
        total = 0.0
        for element in first.keys() | second.keys():
            weight = self.weights(element) if self.weights else 1.0
            total += weight * abs(first[element] - second[element])
        return total


@Metric.register("levenshtein")
class LevenshteinDistance(Metric):
    """Edit distance between the canonical serializations."""

    def distance(self, first, second) -> float:
        source, target = serialize(first), serialize(second)
        if source == target:
            return 0.0
        if len(source) < len(target):
            source, target = target, source

        # Two-row dynamic programming over the shorter string
        previous = list(range(len(target) + 1))
        for i, source_char in enumerate(source, start=1):
            current = [i]
            for j, target_char in enumerate(target, start=1):
                current.append(min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + (source_char != target_char),  # substitution
                ))
            previous = current
        return float(previous[-1])


@Metric.register("ncd")
class NormalizedCompressionDistance(Metric):
    """
    Normalized compression distance over canonical serializations.

        NCD(x, y) = (C(xy) - min(C(x), C(y))) / max(C(x), C(y))

    where C is the compressed length and xy joins the two serializations
    in sorted order. Identical serializations are 0 by definition. Real
    compressors can overshoot slightly above 1.

    Args:
        compressor: One of "zlib", "bz2", "lzma"
    """

    def __init__(self, compressor: str = "zlib"):
        if compressor not in COMPRESSORS:
            raise ConfigurationError(
                f"Unknown compressor: {compressor}. Available: {sorted(COMPRESSORS)}"
            )
        self.compressor = compressor
        self._compress = COMPRESSORS[compressor]

    def compressed_size(self, text: str) -> int:
        return len(self._compress(text.encode("utf-8")))

    def distance(self, first, second) -> float:
        x, y = serialize(first), serialize(second)
        if x == y:
            return 0.0

        cx = self.compressed_size(x)
        cy = self.compressed_size(y)
        # concatenation order is fixed so the distance stays symmetric
        cxy = self.compressed_size(SERIALIZATION_SEPARATOR.join(sorted((x, y))))
        return max(0.0, (cxy - min(cx, cy)) / max(cx, cy))

    def __repr__(self):
        return f"NormalizedCompressionDistance(compressor={self.compressor!r})"
