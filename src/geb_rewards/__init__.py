from .checksum_cache import get_checksum_address
from .config import settings
from .logging import logger
from .version import __version__

# isort: split

from . import exceptions, sources, subgraph, types
from .snapshot import (
    InitialStateAggregator,
    PartialUserRecord,
    UserRecord,
    compute_initial_state,
)
from .subgraph import SubgraphClient

__all__ = (
    "InitialStateAggregator",
    "PartialUserRecord",
    "SubgraphClient",
    "UserRecord",
    "__version__",
    "compute_initial_state",
    "exceptions",
    "get_checksum_address",
    "logger",
    "settings",
    "sources",
    "subgraph",
    "types",
)
