"""
Rewards Configuration

Declares the tunable constants of a distribution round (boost factor,
rank threshold, sponsor pool) and loads them from YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    BOOST_FACTOR,
    BOOST_TOKEN_THRESHOLD,
    DEFAULT_TOTAL_POOL,
    RANK_THRESHOLD,
)
from .exceptions import ConfigurationError
from .storage.provider import StorageConfig

logger = logging.getLogger(__name__)


class Sponsor(BaseModel):
    """A sponsor contributing to the reward pool."""

    id: str
    name: Optional[str] = None
    amount: float = Field(ge=0.0)


class RewardsConfig(BaseModel):
    """Configuration for a reward distribution round.

    ``total_pool`` may be given directly; otherwise it is the sum of the
    sponsor amounts, falling back to ``DEFAULT_TOTAL_POOL`` when no
    sponsors are listed.

    Example:
        >>> config = RewardsConfig(sponsors=[Sponsor(id="base", amount=2500)])
        >>> config.total_pool
        2500.0
    """

    boost_factor: float = Field(default=BOOST_FACTOR)
    rank_threshold: int = Field(default=RANK_THRESHOLD)
    boost_token_threshold: float = Field(default=BOOST_TOKEN_THRESHOLD, ge=0.0)
    sponsors: list[Sponsor] = Field(default_factory=list)
    total_pool: Optional[float] = None
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @field_validator("boost_factor")
    @classmethod
    def validate_boost_factor(cls, v: float) -> float:
        if not v >= 1.0:
            raise ConfigurationError(f"boost_factor must be >= 1.0, got {v}")
        return v

    @field_validator("rank_threshold")
    @classmethod
    def validate_rank_threshold(cls, v: int) -> int:
        if v < 1:
            raise ConfigurationError(f"rank_threshold must be >= 1, got {v}")
        return v

    @model_validator(mode="after")
    def resolve_total_pool(self) -> "RewardsConfig":
        """Derive the pool from sponsors and reject non-positive pools."""
        if self.total_pool is None:
            if self.sponsors:
                self.total_pool = float(sum(s.amount for s in self.sponsors))
            else:
                self.total_pool = DEFAULT_TOTAL_POOL
        if not self.total_pool > 0:
            raise ConfigurationError(
                f"total_pool must be a positive number, got {self.total_pool}"
            )
        return self


def load_config(path: Path) -> RewardsConfig:
    """Load a rewards configuration from a YAML file.

    Raises:
        ConfigurationError: If the file is missing or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config not found: {path}")
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        config = RewardsConfig(**data)
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(f"Failed to load config: {exc}") from exc
    logger.debug("Loaded rewards config from %s (pool=%s)", path, config.total_pool)
    return config
