from geb_rewards.exceptions.base import GebRewardsError, GebRewardsTypeError, GebRewardsValueError
from geb_rewards.exceptions.fetching import (
    FetchingError,
    SubgraphQueryError,
    SubgraphResponseError,
)
from geb_rewards.exceptions.snapshot import (
    IncompleteUserRecord,
    InconsistentPoolState,
    SnapshotError,
)

from . import (
    fetching,
    snapshot,
)

__all__ = (
    "FetchingError",
    "GebRewardsError",
    "GebRewardsTypeError",
    "GebRewardsValueError",
    "IncompleteUserRecord",
    "InconsistentPoolState",
    "SnapshotError",
    "SubgraphQueryError",
    "SubgraphResponseError",
    "fetching",
    "snapshot",
)
