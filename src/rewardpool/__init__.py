"""
RewardPool - leaderboard reward distribution with pay-it-forward opt-outs

Splits a fixed sponsor pool among the top-ranked participants of a
leaderboard, carving out the proportional share of participants who chose
to pay their reward forward and recording it as a contribution.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .config import RewardsConfig, Sponsor, load_config
from .decisions import DecisionRegistry, RewardsDecision, apply_decisions
from .models import (
    BoostedEntry,
    CohortSplit,
    Contribution,
    ContributionRecord,
    PoolAllocation,
    PoolSummary,
    RankedEntry,
    RewardResult,
)

# Exceptions
from .exceptions import (
    RewardPoolError,
    ConfigurationError,
    ContributionValidationError,
    StorageError,
    DecisionError,
)

from .reward import (
    BoostedScoreResolver,
    CohortPartitioner,
    ContributionPersister,
    PoolAllocator,
    RewardAllocator,
    RewardsDistributor,
    format_reward,
    is_boost_eligible,
)

__all__ = [
    # Version
    "__version__",

    # Configuration
    "RewardsConfig",
    "Sponsor",
    "load_config",

    # Decisions
    "DecisionRegistry",
    "RewardsDecision",
    "apply_decisions",

    # Models
    "BoostedEntry",
    "CohortSplit",
    "Contribution",
    "ContributionRecord",
    "PoolAllocation",
    "PoolSummary",
    "RankedEntry",
    "RewardResult",

    # Exceptions
    "RewardPoolError",
    "ConfigurationError",
    "ContributionValidationError",
    "StorageError",
    "DecisionError",

    # Engine
    "BoostedScoreResolver",
    "CohortPartitioner",
    "ContributionPersister",
    "PoolAllocator",
    "RewardAllocator",
    "RewardsDistributor",
    "format_reward",
    "is_boost_eligible",
]
