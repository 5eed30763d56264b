from web3 import AsyncBaseProvider, AsyncWeb3

from geb_rewards.checksum_cache import get_checksum_address
from geb_rewards.functions import encode_function_calldata, raw_call, scale_to_decimal
from geb_rewards.sources.protocols import PoolState
from geb_rewards.types.aliases import BlockNumber

GET_RESERVES_CALLDATA = encode_function_calldata("getReserves()", None)
TOTAL_SUPPLY_CALLDATA = encode_function_calldata("totalSupply()", None)


class RpcPoolStateOracle:
    """
    Reads Uniswap V2 pair reserves and LP token supply directly from the pair contract, using
    `eth_call` at the requested block. The node must serve historical state for that block.

    Raw amounts are scaled to whole tokens so the result is interchangeable with the values
    published by the subgraph.
    """

    def __init__(
        self,
        w3: AsyncWeb3[AsyncBaseProvider],
        pool_address: str,
        tracked_reserve_index: int = 0,
        tracked_token_decimals: int = 18,
        lp_token_decimals: int = 18,
    ) -> None:
        self.w3 = w3
        self.pool_address = get_checksum_address(pool_address)
        self.tracked_reserve_index = tracked_reserve_index
        self.tracked_token_decimals = tracked_token_decimals
        self.lp_token_decimals = lp_token_decimals

    async def pool_state(self, block_number: BlockNumber) -> PoolState:
        reserves = await raw_call(
            w3=self.w3,
            address=self.pool_address,
            calldata=GET_RESERVES_CALLDATA,
            return_types=["uint112", "uint112", "uint32"],
            block_identifier=block_number,
        )
        (total_supply,) = await raw_call(
            w3=self.w3,
            address=self.pool_address,
            calldata=TOTAL_SUPPLY_CALLDATA,
            return_types=["uint256"],
            block_identifier=block_number,
        )

        return PoolState(
            address=self.pool_address,
            block=block_number,
            tracked_reserve=scale_to_decimal(
                reserves[self.tracked_reserve_index], self.tracked_token_decimals
            ),
            total_supply=scale_to_decimal(total_supply, self.lp_token_decimals),
        )
