# Copyright (c) RewardPool Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for RewardPool.

All RewardPool exceptions inherit from RewardPoolError, enabling
consistent error handling for callers of the distribution engine.
"""


class RewardPoolError(Exception):
    """Base exception for all RewardPool errors."""


class ConfigurationError(RewardPoolError):
    """Invalid or missing engine configuration (pool size, backend, file)."""


class ContributionValidationError(RewardPoolError):
    """A contribution batch contained an invalid participant id or amount."""


class StorageError(RewardPoolError):
    """Errors related to contribution store operations."""


class DecisionError(RewardPoolError):
    """Errors related to recording opt-out decisions."""


__all__ = [
    "RewardPoolError",
    "ConfigurationError",
    "ContributionValidationError",
    "StorageError",
    "DecisionError",
]
