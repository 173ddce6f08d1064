"""Command line interface for RewardPool."""

from .main import app

__all__ = ["app"]
