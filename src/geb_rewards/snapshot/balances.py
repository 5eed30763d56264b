from decimal import Decimal, localcontext
from typing import Any

from geb_rewards.checksum_cache import get_checksum_address
from geb_rewards.constants import DECIMAL_PRECISION
from geb_rewards.exceptions import InconsistentPoolState
from geb_rewards.functions import gather_or_cancel
from geb_rewards.logging import logger
from geb_rewards.snapshot.types import ZERO, RawBalanceEntry
from geb_rewards.sources.protocols import PaginatedDataSource, PoolState, PoolStateOracle
from geb_rewards.subgraph.queries import ERC20_BALANCE_FIELDS, ERC20_BALANCES, parse_decimal
from geb_rewards.types.aliases import BlockNumber


def check_pool_state(pool_state: PoolState, block_number: BlockNumber) -> None:
    """
    Raise `InconsistentPoolState` unless the pool state was read at `block_number` and can be used
    as the denominator and numerator of the LP token price.
    """

    if pool_state.block != block_number:
        raise InconsistentPoolState(
            pool=pool_state.address,
            block_number=block_number,
            reason=f"state was read at block {pool_state.block}",
        )

    for name, value in (
        ("reserve", pool_state.tracked_reserve),
        ("total supply", pool_state.total_supply),
    ):
        if not value.is_finite() or value <= ZERO:
            raise InconsistentPoolState(
                pool=pool_state.address,
                block_number=block_number,
                reason=f"{name} is {value}",
            )


def lp_balance_to_rai(lp_balance: Decimal, pool_state: PoolState) -> Decimal:
    """
    RAI LP balance = LP balance * RAI reserve / total LP supply
    """

    with localcontext(prec=DECIMAL_PRECISION):
        return lp_balance * pool_state.tracked_reserve / pool_state.total_supply


class BalanceNormalizer:
    """
    Converts LP token holdings into the implied holding of the reward-tracked asset.
    """

    def __init__(
        self,
        source: PaginatedDataSource,
        pool_state_oracle: PoolStateOracle,
        lp_token_address: str,
    ) -> None:
        self.source = source
        self.pool_state_oracle = pool_state_oracle
        self.lp_token_address = get_checksum_address(lp_token_address)

    async def fetch_balances(self, block_number: BlockNumber) -> list[RawBalanceEntry]:
        """
        Fetch every non-zero LP token balance at the block and price it with the pool state from
        that same block.
        """

        records: list[dict[str, Any]]
        records, pool_state = await gather_or_cancel(
            self.source.fetch_paginated(
                ERC20_BALANCES,
                ERC20_BALANCE_FIELDS,
                where={
                    "tokenAddress": self.lp_token_address.lower(),
                    "balance_gt": 0,
                },
                block_number=block_number,
            ),
            self.pool_state_oracle.pool_state(block_number),
        )
        check_pool_state(pool_state, block_number)

        logger.debug(
            f"Pool {pool_state.address} at block {block_number}: "
            f"reserve {pool_state.tracked_reserve}, LP supply {pool_state.total_supply}"
        )

        balances = []
        for record in records:
            lp_balance = parse_decimal(
                record, "balance", entity=ERC20_BALANCES, url=self.source.url
            )
            balances.append(
                RawBalanceEntry(
                    address=get_checksum_address(record["address"]),
                    lp_balance=lp_balance,
                    rai_lp_balance=lp_balance_to_rai(lp_balance, pool_state),
                )
            )
        return balances
