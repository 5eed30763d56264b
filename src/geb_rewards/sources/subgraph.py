from collections.abc import Mapping
from decimal import Decimal

from eth_typing import ChecksumAddress

from geb_rewards.checksum_cache import get_checksum_address
from geb_rewards.exceptions import InconsistentPoolState, SubgraphResponseError
from geb_rewards.logging import logger
from geb_rewards.sources.protocols import PoolState
from geb_rewards.subgraph.client import SubgraphClient
from geb_rewards.subgraph.queries import (
    COLLATERAL_TYPE,
    COLLATERAL_TYPE_FIELDS,
    SAFE_HANDLER_OWNER_FIELDS,
    SAFE_HANDLER_OWNERS,
    UNISWAP_V2_PAIR_FIELDS,
    UNISWAP_V2_PAIRS,
    parse_decimal,
)
from geb_rewards.types.aliases import BlockNumber, SafeHandler


class SubgraphRateOracle:
    """
    Reads the accumulated rate of a collateral type from the GEB subgraph.
    """

    def __init__(self, client: SubgraphClient, collateral_type: str = "ETH-A") -> None:
        self.client = client
        self.collateral_type = collateral_type

    async def accumulated_rate(self, block_number: BlockNumber) -> Decimal:
        collateral = await self.client.fetch_entity(
            COLLATERAL_TYPE,
            COLLATERAL_TYPE_FIELDS,
            entity_id=self.collateral_type,
            block_number=block_number,
        )
        if collateral is None:
            raise SubgraphResponseError(
                url=self.client.url,
                errors=[
                    f"Collateral type {self.collateral_type} not found at block {block_number}"
                ],
            )
        return parse_decimal(
            collateral, "accumulatedRate", entity=COLLATERAL_TYPE, url=self.client.url
        )


class SubgraphPoolStateOracle:
    """
    Reads Uniswap V2 pair reserves and LP token supply from a Uniswap subgraph.
    """

    def __init__(
        self,
        client: SubgraphClient,
        pool_address: str,
        tracked_reserve_index: int = 0,
    ) -> None:
        self.client = client
        self.pool_address = get_checksum_address(pool_address)
        self.tracked_reserve_index = tracked_reserve_index

    async def pool_state(self, block_number: BlockNumber) -> PoolState:
        pairs = await self.client.fetch_entity(
            UNISWAP_V2_PAIRS,
            UNISWAP_V2_PAIR_FIELDS,
            where={"address": self.pool_address.lower()},
            block_number=block_number,
        )
        if not pairs:
            raise InconsistentPoolState(
                pool=self.pool_address,
                block_number=block_number,
                reason="pool not found",
            )

        (pair, *_) = pairs
        return PoolState(
            address=self.pool_address,
            block=block_number,
            tracked_reserve=parse_decimal(
                pair,
                f"reserve{self.tracked_reserve_index}",
                entity=UNISWAP_V2_PAIRS,
                url=self.client.url,
            ),
            total_supply=parse_decimal(
                pair, "totalSupply", entity=UNISWAP_V2_PAIRS, url=self.client.url
            ),
        )


class SubgraphOwnerResolver:
    """
    Maps safe handlers to the address controlling them, from the GEB subgraph.
    """

    def __init__(self, client: SubgraphClient) -> None:
        self.client = client

    async def resolve_owners(
        self, block_number: BlockNumber
    ) -> Mapping[SafeHandler, ChecksumAddress]:
        records = await self.client.fetch_paginated(
            SAFE_HANDLER_OWNERS,
            SAFE_HANDLER_OWNER_FIELDS,
            block_number=block_number,
        )
        owners = {
            record["id"].lower(): get_checksum_address(record["owner"]["id"]) for record in records
        }
        logger.debug(f"Resolved {len(owners)} safe handler owners at block {block_number}")
        return owners
