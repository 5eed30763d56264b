"""
Interfaces to the external collaborators consumed by the snapshot.

The snapshot only depends on these protocols. Implementations backed by a subgraph, a JSON-RPC
endpoint or a local file live in the sibling modules, and tests substitute in-memory fakes.
"""

import dataclasses
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Protocol

from eth_typing import ChecksumAddress

from geb_rewards.types.aliases import BlockNumber, SafeHandler


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class PoolState:
    """
    Reserve of the reward-tracked asset and total LP token supply of a pool at a block.
    """

    address: ChecksumAddress
    block: BlockNumber
    tracked_reserve: Decimal
    total_supply: Decimal


class PaginatedDataSource(Protocol):
    url: str

    async def fetch_paginated(
        self,
        entity: str,
        fields: Sequence[str],
        *,
        where: Mapping[str, Any] | None = None,
        block_number: BlockNumber | None = None,
    ) -> list[dict[str, Any]]:
        """
        Return every record of `entity` matching `where` at the block, fully materialized.
        """
        ...


class RateOracle(Protocol):
    async def accumulated_rate(self, block_number: BlockNumber) -> Decimal:
        """
        Return the accumulated interest rate factor at the block.
        """
        ...


class PoolStateOracle(Protocol):
    async def pool_state(self, block_number: BlockNumber) -> PoolState: ...


class OwnerResolver(Protocol):
    async def resolve_owners(
        self, block_number: BlockNumber
    ) -> Mapping[SafeHandler, ChecksumAddress]:
        """
        Return the owner of every known safe handler at the block. Handler keys are lowercase.
        """
        ...


class ExclusionProvider(Protocol):
    async def get_exclusion_set(self) -> set[ChecksumAddress]: ...
