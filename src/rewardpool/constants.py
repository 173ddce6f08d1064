"""Default constants governing reward distribution.

Every value here is a default for :class:`rewardpool.config.RewardsConfig`;
callers override them through configuration rather than by editing this file.
"""

# Score multiplier applied to participants holding the boost token balance.
BOOST_FACTOR = 1.1

# Only leaderboard positions at or above this rank are reward-eligible.
RANK_THRESHOLD = 200

# Minimum token balance that qualifies a participant for the boost.
BOOST_TOKEN_THRESHOLD = 100.0

# Pool used when neither an explicit total nor a sponsor list is configured.
DEFAULT_TOTAL_POOL = 5000.0

# Tolerance used when checking pool conservation.
CONSERVATION_TOLERANCE = 1e-6
