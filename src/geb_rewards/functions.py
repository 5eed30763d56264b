import asyncio
from collections.abc import Awaitable, Sequence
from decimal import Decimal
from typing import Any

import eth_abi.abi
from eth_typing import ChecksumAddress
from eth_utils.crypto import keccak
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.types import BlockIdentifier, TxParams

from geb_rewards.exceptions import GebRewardsValueError


def encode_function_calldata(
    function_prototype: str, function_arguments: Sequence[Any] | None
) -> bytes:
    """
    Encode the calldata to execute a call to the given function prototype, with ordered arguments.
    The resulting bytes array will include the 4-byte function selector, followed by the
    ABI-encoded arguments.
    """

    if function_arguments is None:
        function_arguments = ()

    return keccak(text=function_prototype)[:4] + eth_abi.abi.encode(
        types=extract_argument_types_from_function_prototype(function_prototype),
        args=function_arguments,
    )


def extract_argument_types_from_function_prototype(function_prototype: str) -> list[str]:
    """
    Extract the argument types from the function prototype.

    e.g. the argument types for the prototype 'function(address,uint256)' are ['address','uint256']
    """

    if function_args := function_prototype[
        function_prototype.find("(") + 1 : function_prototype.find(")") :
    ]:
        return function_args.split(",")

    return []


async def raw_call(
    w3: AsyncWeb3[AsyncBaseProvider],
    address: ChecksumAddress,
    calldata: bytes,
    return_types: list[str],
    block_identifier: BlockIdentifier | None = None,
) -> tuple[Any, ...]:
    """
    Perform an eth_call at the given address and return the decoded response.
    """

    return eth_abi.abi.decode(
        types=return_types,
        data=await w3.eth.call(
            transaction=TxParams(
                to=address,
                data=calldata,
            ),
            block_identifier=block_identifier,
        ),
    )


def scale_to_decimal(amount: int, decimals: int) -> Decimal:
    """
    Convert an integer token amount to a decimal amount of whole tokens.
    """

    if decimals < 0:
        raise GebRewardsValueError(message=f"Invalid decimals {decimals}")
    return Decimal(amount).scaleb(-decimals)


async def gather_or_cancel(*coroutines: Awaitable[Any]) -> list[Any]:
    """
    Run the awaitables concurrently and return their results in order, like `asyncio.gather`.

    If one raises, the others are cancelled and awaited before the exception propagates unchanged.
    """

    tasks = [asyncio.ensure_future(coroutine) for coroutine in coroutines]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
