"""Tests for the centralized exception hierarchy."""

import pytest

from rewardpool.exceptions import (
    ConfigurationError,
    ContributionValidationError,
    DecisionError,
    RewardPoolError,
    StorageError,
)


class TestExceptionHierarchy:
    """Verify the exception class hierarchy is correct."""

    def test_base_exception_exists(self):
        assert issubclass(RewardPoolError, Exception)

    @pytest.mark.parametrize(
        "exc_cls",
        [
            ConfigurationError,
            ContributionValidationError,
            StorageError,
            DecisionError,
        ],
    )
    def test_direct_subclasses_of_rewardpool_error(self, exc_cls):
        assert issubclass(exc_cls, RewardPoolError)
        assert exc_cls.__bases__ == (RewardPoolError,)

    def test_catch_all_with_base(self):
        with pytest.raises(RewardPoolError):
            raise StorageError("store unavailable")

    def test_configuration_error_is_not_value_error(self):
        """Raised from pydantic validators without being wrapped."""
        assert not issubclass(ConfigurationError, ValueError)


class TestExceptionExports:
    def test_importable_from_package(self):
        from rewardpool import (  # noqa: F401
            ConfigurationError,
            ContributionValidationError,
            DecisionError,
            RewardPoolError,
            StorageError,
        )
