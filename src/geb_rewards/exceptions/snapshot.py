"""
Exceptions raised while building the initial staking state.
"""

from typing import Any

from geb_rewards.exceptions.base import GebRewardsError
from geb_rewards.types.aliases import BlockNumber


class SnapshotError(GebRewardsError):
    """
    Base exception for errors which abort a snapshot.
    """


class InconsistentPoolState(SnapshotError):
    """
    Raised when the liquidity pool reserve or total supply cannot be used to price LP tokens.
    """

    def __init__(self, pool: str, block_number: BlockNumber, reason: str) -> None:
        self.pool = pool
        self.block_number = block_number
        self.reason = reason
        super().__init__(
            message=f"Inconsistent state for pool {pool} at block {block_number}: {reason}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.pool, self.block_number, self.reason)


class IncompleteUserRecord(SnapshotError):
    """
    Raised when a user record fails validation after the staking weight has been derived.
    """

    def __init__(self, address: str, field: str, reason: str = "undefined") -> None:
        self.address = address
        self.field = field
        self.reason = reason
        super().__init__(
            message=f"Inconsistent initial state for user {address}: field {field!r} is {reason}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.address, self.field, self.reason)
