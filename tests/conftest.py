import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

import pytest
from eth_typing import ChecksumAddress

from geb_rewards.checksum_cache import get_checksum_address
from geb_rewards.logging import logger
from geb_rewards.sources.protocols import PoolState

POOL_ADDRESS = get_checksum_address("0x8ae720a71622e824f576b4a8c03031066548a3b1")


def make_address(index: int) -> ChecksumAddress:
    return get_checksum_address(f"0x{index:040x}")


def make_handler(index: int) -> str:
    return f"0x{index + 0xABC000:040x}"


@pytest.fixture(scope="session", autouse=True)
def _set_geb_rewards_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


class FakeDataSource:
    """
    Serves canned records per entity and records the requests it received.
    """

    url = "https://example.com/geb"

    def __init__(self, records: Mapping[str, list[dict[str, Any]]]) -> None:
        self.records = records
        self.requests: list[tuple[str, dict[str, Any] | None, int | None]] = []

    async def fetch_paginated(
        self,
        entity: str,
        fields: Sequence[str],
        *,
        where: Mapping[str, Any] | None = None,
        block_number: int | None = None,
    ) -> list[dict[str, Any]]:
        self.requests.append((entity, dict(where) if where else None, block_number))
        return list(self.records.get(entity, []))


class FakePoolStateOracle:
    def __init__(
        self,
        tracked_reserve: Decimal | str,
        total_supply: Decimal | str,
        block_offset: int = 0,
    ) -> None:
        self.tracked_reserve = Decimal(tracked_reserve)
        self.total_supply = Decimal(total_supply)
        self.block_offset = block_offset
        self.requested_blocks: list[int] = []

    async def pool_state(self, block_number: int) -> PoolState:
        self.requested_blocks.append(block_number)
        return PoolState(
            address=POOL_ADDRESS,
            block=block_number + self.block_offset,
            tracked_reserve=self.tracked_reserve,
            total_supply=self.total_supply,
        )


class FakeRateOracle:
    def __init__(self, rate: Decimal | str) -> None:
        self.rate = Decimal(rate)
        self.requested_blocks: list[int] = []

    async def accumulated_rate(self, block_number: int) -> Decimal:
        self.requested_blocks.append(block_number)
        return self.rate


class FakeOwnerResolver:
    def __init__(self, owners: Mapping[str, ChecksumAddress]) -> None:
        self.owners = {handler.lower(): owner for handler, owner in owners.items()}
        self.requested_blocks: list[int] = []

    async def resolve_owners(self, block_number: int) -> dict[str, ChecksumAddress]:
        self.requested_blocks.append(block_number)
        return dict(self.owners)


class FakeBalanceNormalizer:
    def __init__(self, balances: list[Any]) -> None:
        self.balances = balances

    async def fetch_balances(self, block_number: int) -> list[Any]:
        return list(self.balances)


class FakeDebtNormalizer:
    def __init__(self, debts: list[Any]) -> None:
        self.debts = debts

    async def fetch_debts(self, start_block: int, end_block: int) -> list[Any]:
        return list(self.debts)


@pytest.fixture
def geb_caplog(caplog: pytest.LogCaptureFixture):
    """
    The package logger does not propagate, so attach the capture handler to it directly
    """
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)
