"""
Configuration for the consistency engine

Validated with Pydantic so that an unknown algorithm or an invalid
parameter fails when the configuration is built, never during evaluate().
Loadable from plain mappings, environment variables (.env aware) and
Hydra/OmegaConf config objects.
"""

import math
import os
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from consistency.exceptions import ConfigurationError


DEFAULT_ITERATIONS = 8
DEFAULT_EPSILON = 0.001
DEFAULT_METRIC = "ncd"
DEFAULT_FILTER = "belief"


class Algorithm(str, Enum):
    """Stationary distribution algorithms"""
    EXACT = "exact"  # Full eigendecomposition
    ITERATIVE = "iterative"  # Power method with a fixed iteration count


class ConsistencyConfig(BaseModel):
    """Complete consistency engine configuration"""
    algorithm: Algorithm = Field(
        default=Algorithm.EXACT,
        description="Stationary distribution algorithm: exact or iterative"
    )
    iterations: int = Field(
        ge=1, default=DEFAULT_ITERATIONS,
        description="Number of power-method iterations (iterative algorithm only)"
    )
    epsilon: float = Field(
        gt=0.0, default=DEFAULT_EPSILON,
        description="Self-loop weight placed on the matrix diagonal"
    )
    seed: Optional[int] = Field(
        ge=0, default=None,
        description="Seed for the power-method start vector (None = nondeterministic)"
    )
    max_workers: Optional[int] = Field(
        ge=1, default=None,
        description="Thread pool size for pairwise distances (1 = sequential)"
    )
    metric: str = Field(default=DEFAULT_METRIC, description="Registered metric name")
    filter: str = Field(default=DEFAULT_FILTER, description="Registered filter name")

    @field_validator('epsilon')
    @classmethod
    def validate_epsilon(cls, v):
        if not math.isfinite(v):
            raise ValueError("epsilon must be finite")
        return v

    @field_validator('metric', 'filter')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("component name must not be empty")
        return v.strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsistencyConfig":
        """Create from dictionary, raising ConfigurationError on invalid values"""
        try:
            return cls(**dict(data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid consistency configuration: {e}") from e

    @classmethod
    def from_env(cls, prefix: str = "CONSISTENCY_", dotenv: bool = True) -> "ConsistencyConfig":
        """
        Load configuration from environment variables.

        Each field maps to ``<prefix><FIELD>``, e.g. CONSISTENCY_ALGORITHM.
        Unset or empty variables keep their defaults.

        Args:
            prefix: Environment variable prefix
            dotenv: Load a .env file first (existing variables win)

        Returns:
            Validated ConsistencyConfig
        """
        if dotenv:
            load_dotenv()

        data = {}
        for name in cls.model_fields:
            value = os.getenv(f"{prefix}{name.upper()}")
            if value is not None and value.strip():
                data[name] = value.strip()
        return cls.from_dict(data)

    @classmethod
    def from_hydra_config(cls, cfg: Any) -> "ConsistencyConfig":
        """
        Load configuration from a Hydra config object.

        Reads the ``consistency`` section if present, otherwise returns
        the default config.
        """
        section = getattr(cfg, 'consistency', None)
        if section is not None:
            data = {
                name: section.get(name)
                for name in cls.model_fields
                if section.get(name) is not None
            }
            return cls.from_dict(data)

        return cls()
