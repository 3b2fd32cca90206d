"""
Custom exceptions for consistency scoring.
"""


class ConsistencyError(Exception):
    """Base exception for all consistency scoring errors."""
    pass


class ConfigurationError(ConsistencyError):
    """Raised when configuration is invalid or names an unknown component."""
    pass


class MetricContractError(ConsistencyError):
    """Raised when a metric returns a negative or non-finite distance."""
    pass


class FilterError(ConsistencyError):
    """Raised when a filter cannot project an entity."""
    pass
