import aiohttp
from eth_typing import ChecksumAddress
from web3 import AsyncBaseProvider, AsyncWeb3

from geb_rewards.config import Settings
from geb_rewards.config import settings as default_settings
from geb_rewards.connection import close_async_web3, get_async_web3_from_config
from geb_rewards.exceptions import GebRewardsValueError
from geb_rewards.snapshot.aggregator import InitialStateAggregator
from geb_rewards.snapshot.balances import BalanceNormalizer
from geb_rewards.snapshot.debts import DebtNormalizer
from geb_rewards.snapshot.types import UserRecord
from geb_rewards.sources import (
    ExclusionProvider,
    FileExclusionProvider,
    PoolStateOracle,
    RpcPoolStateOracle,
    StaticExclusionProvider,
    SubgraphOwnerResolver,
    SubgraphPoolStateOracle,
    SubgraphRateOracle,
)
from geb_rewards.subgraph import SubgraphClient
from geb_rewards.types.aliases import BlockNumber


def build_aggregator(
    config: Settings,
    *,
    geb_client: SubgraphClient,
    uniswap_client: SubgraphClient,
    w3: AsyncWeb3[AsyncBaseProvider] | None = None,
) -> InitialStateAggregator:
    """
    Wire the snapshot components to the data sources selected by the config.
    """

    pool_state_oracle: PoolStateOracle
    match config.pool.state_source:
        case "subgraph":
            pool_state_oracle = SubgraphPoolStateOracle(
                client=uniswap_client,
                pool_address=config.pool.address,
                tracked_reserve_index=config.pool.tracked_reserve_index,
            )
        case "rpc":
            if w3 is None:
                raise GebRewardsValueError(
                    message="A Web3 connection is required to read the pool state on-chain."
                )
            pool_state_oracle = RpcPoolStateOracle(
                w3=w3,
                pool_address=config.pool.address,
                tracked_reserve_index=config.pool.tracked_reserve_index,
            )

    exclusion_provider: ExclusionProvider = (
        FileExclusionProvider(config.exclusion_list)
        if config.exclusion_list is not None
        else StaticExclusionProvider()
    )

    return InitialStateAggregator(
        balance_normalizer=BalanceNormalizer(
            source=geb_client,
            pool_state_oracle=pool_state_oracle,
            lp_token_address=config.pool.address,
        ),
        debt_normalizer=DebtNormalizer(
            source=geb_client,
            owner_resolver=SubgraphOwnerResolver(geb_client),
            rate_oracle=SubgraphRateOracle(geb_client, collateral_type=config.collateral_type),
        ),
        exclusion_provider=exclusion_provider,
    )


async def compute_initial_state(
    start_block: BlockNumber,
    end_block: BlockNumber,
    *,
    config: Settings | None = None,
) -> dict[ChecksumAddress, UserRecord]:
    """
    Compute the initial staking state for the period from `start_block` to `end_block`, using the
    subgraphs (and optionally the RPC endpoint) defined in the config.
    """

    if config is None:
        config = default_settings

    w3 = await get_async_web3_from_config(config) if config.pool.state_source == "rpc" else None

    try:
        async with aiohttp.ClientSession(raise_for_status=True) as session:
            geb_client, uniswap_client = (
                SubgraphClient(
                    str(url),
                    page_size=config.subgraph.page_size,
                    timeout=config.subgraph.timeout,
                    session=session,
                )
                for url in (config.subgraph.geb_url, config.subgraph.uniswap_url)
            )
            aggregator = build_aggregator(
                config,
                geb_client=geb_client,
                uniswap_client=uniswap_client,
                w3=w3,
            )
            return await aggregator.compute_initial_state(start_block, end_block)
    finally:
        if w3 is not None:
            await close_async_web3(w3)
