import asyncio
from decimal import Decimal

import pytest
from hexbytes import HexBytes

from geb_rewards.exceptions import GebRewardsValueError
from geb_rewards.functions import (
    encode_function_calldata,
    extract_argument_types_from_function_prototype,
    gather_or_cancel,
    scale_to_decimal,
)


def test_extract_argument_types_from_function_prototype():
    assert extract_argument_types_from_function_prototype("totalSupply()") == []
    assert extract_argument_types_from_function_prototype("balanceOf(address)") == ["address"]
    assert extract_argument_types_from_function_prototype("safes(uint256,address)") == [
        "uint256",
        "address",
    ]


def test_encode_function_calldata():
    assert encode_function_calldata("getReserves()", None) == HexBytes("0x0902f1ac")
    assert encode_function_calldata("totalSupply()", []) == HexBytes("0x18160ddd")
    assert encode_function_calldata(
        function_prototype="balanceOf(address)",
        function_arguments=["0x8aE720a71622e824F576b4A8C03031066548A3B1"],
    ) == HexBytes(
        "0x70a082310000000000000000000000008ae720a71622e824f576b4a8c03031066548a3b1"
    )


def test_scale_to_decimal():
    assert scale_to_decimal(10**18, 18) == Decimal(1)
    assert scale_to_decimal(15 * 10**17, 18) == Decimal("1.5")
    assert scale_to_decimal(1, 0) == Decimal(1)
    assert scale_to_decimal(1, 27) == Decimal("1E-27")

    with pytest.raises(GebRewardsValueError):
        scale_to_decimal(1, -1)


async def test_gather_or_cancel_returns_results_in_order():
    async def delayed(value: int, delay: float) -> int:
        await asyncio.sleep(delay)
        return value

    assert await gather_or_cancel(delayed(1, 0.02), delayed(2, 0)) == [1, 2]


async def test_gather_or_cancel_cancels_siblings_on_failure():
    sibling_cancelled = asyncio.Event()

    async def slow() -> None:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            sibling_cancelled.set()
            raise

    async def failing() -> None:
        await asyncio.sleep(0)
        raise GebRewardsValueError(message="boom")

    with pytest.raises(GebRewardsValueError, match="boom"):
        await gather_or_cancel(slow(), failing())

    assert sibling_cancelled.is_set()
