from decimal import Decimal

import pytest

from geb_rewards.exceptions import SubgraphResponseError
from geb_rewards.snapshot.debts import DebtNormalizer
from geb_rewards.subgraph.queries import SAFES

from .conftest import (
    FakeDataSource,
    FakeOwnerResolver,
    FakeRateOracle,
    make_address,
    make_handler,
)

START_BLOCK = 11_848_304
END_BLOCK = 11_978_000


async def test_fetch_debts_adjusts_for_accumulated_rate():
    owner = make_address(1)
    source = FakeDataSource(
        {
            SAFES: [
                {"safeHandler": make_handler(1), "debt": "100"},
                {"safeHandler": make_handler(2), "debt": "0.5"},
            ]
        }
    )
    normalizer = DebtNormalizer(
        source=source,
        owner_resolver=FakeOwnerResolver({make_handler(1): owner, make_handler(2): owner}),
        rate_oracle=FakeRateOracle("1.02"),
    )

    debts = await normalizer.fetch_debts(START_BLOCK, END_BLOCK)

    assert [debt.address for debt in debts] == [owner, owner]
    assert debts[0].debt == Decimal("102")
    assert debts[1].debt == Decimal("0.51")


async def test_fetch_debts_block_asymmetry():
    """
    Debt and rate are read at the start block, ownership at the end block.
    """

    source = FakeDataSource({SAFES: []})
    owner_resolver = FakeOwnerResolver({})
    rate_oracle = FakeRateOracle("1")
    normalizer = DebtNormalizer(
        source=source,
        owner_resolver=owner_resolver,
        rate_oracle=rate_oracle,
    )

    await normalizer.fetch_debts(START_BLOCK, END_BLOCK)

    assert source.requests == [(SAFES, {"debt_gt": 0}, START_BLOCK)]
    assert rate_oracle.requested_blocks == [START_BLOCK]
    assert owner_resolver.requested_blocks == [END_BLOCK]


async def test_fetch_debts_credits_owner_at_end_block():
    original_owner = make_address(1)
    new_owner = make_address(2)
    source = FakeDataSource({SAFES: [{"safeHandler": make_handler(1), "debt": "10"}]})

    # The resolver reflects the end block, after the safe changed hands
    normalizer = DebtNormalizer(
        source=source,
        owner_resolver=FakeOwnerResolver({make_handler(1): new_owner}),
        rate_oracle=FakeRateOracle("1"),
    )

    (debt,) = await normalizer.fetch_debts(START_BLOCK, END_BLOCK)
    assert debt.address == new_owner
    assert debt.address != original_owner


async def test_fetch_debts_skips_unowned_handler(geb_caplog):
    owner = make_address(1)
    orphan_handler = make_handler(99)
    source = FakeDataSource(
        {
            SAFES: [
                {"safeHandler": make_handler(1), "debt": "10"},
                {"safeHandler": orphan_handler, "debt": "1000"},
            ]
        }
    )
    normalizer = DebtNormalizer(
        source=source,
        owner_resolver=FakeOwnerResolver({make_handler(1): owner}),
        rate_oracle=FakeRateOracle("1"),
    )

    debts = await normalizer.fetch_debts(START_BLOCK, END_BLOCK)

    assert f"Safe handler {orphan_handler} has no owner" in geb_caplog.text

    assert len(debts) == 1
    assert debts[0].address == owner
    assert debts[0].debt == Decimal(10)
    assert sum(debt.debt for debt in debts) == Decimal(10)


async def test_fetch_debts_matches_handlers_case_insensitively():
    owner = make_address(1)
    source = FakeDataSource({SAFES: [{"safeHandler": make_handler(1).upper(), "debt": "10"}]})
    normalizer = DebtNormalizer(
        source=source,
        owner_resolver=FakeOwnerResolver({make_handler(1): owner}),
        rate_oracle=FakeRateOracle("1"),
    )

    (debt,) = await normalizer.fetch_debts(START_BLOCK, END_BLOCK)
    assert debt.address == owner


async def test_fetch_debts_missing_debt_value():
    normalizer = DebtNormalizer(
        source=FakeDataSource({SAFES: [{"safeHandler": make_handler(1), "debt": None}]}),
        owner_resolver=FakeOwnerResolver({make_handler(1): make_address(1)}),
        rate_oracle=FakeRateOracle("1.02"),
    )
    with pytest.raises(SubgraphResponseError, match=r"Invalid safes\.debt value None"):
        await normalizer.fetch_debts(START_BLOCK, END_BLOCK)
