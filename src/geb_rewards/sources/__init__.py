from .exclusions import FileExclusionProvider, StaticExclusionProvider
from .protocols import (
    ExclusionProvider,
    OwnerResolver,
    PaginatedDataSource,
    PoolState,
    PoolStateOracle,
    RateOracle,
)
from .rpc import RpcPoolStateOracle
from .subgraph import SubgraphOwnerResolver, SubgraphPoolStateOracle, SubgraphRateOracle

__all__ = (
    "ExclusionProvider",
    "FileExclusionProvider",
    "OwnerResolver",
    "PaginatedDataSource",
    "PoolState",
    "PoolStateOracle",
    "RateOracle",
    "RpcPoolStateOracle",
    "StaticExclusionProvider",
    "SubgraphOwnerResolver",
    "SubgraphPoolStateOracle",
    "SubgraphRateOracle",
)
