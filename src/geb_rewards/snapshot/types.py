"""
Record types for the initial staking state.

A user record goes through two stages. `PartialUserRecord` is created on first reference during the
fold over balance and debt entries, and is mutated in place. Once the fold and the exclusions are
complete, `PartialUserRecord.finalize` derives the staking weight, validates every field, and
returns an immutable `UserRecord`. Only `UserRecord` instances are ever returned to callers.
"""

import dataclasses
from collections.abc import Mapping
from decimal import Decimal, localcontext
from typing import Any, ClassVar

from eth_typing import ChecksumAddress
from pydantic import TypeAdapter

from geb_rewards.constants import DECIMAL_PRECISION
from geb_rewards.exceptions import IncompleteUserRecord

ZERO = Decimal(0)


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class RawBalanceEntry:
    address: ChecksumAddress
    lp_balance: Decimal
    rai_lp_balance: Decimal


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class RawDebtEntry:
    address: ChecksumAddress
    debt: Decimal


@dataclasses.dataclass(slots=True, frozen=True, kw_only=True)
class UserRecord:
    address: ChecksumAddress
    debt: Decimal
    earned: Decimal
    lp_balance: Decimal
    rai_lp_balance: Decimal
    reward_per_weight_stored: Decimal
    staking_weight: Decimal

    NUMERIC_FIELDS: ClassVar[tuple[str, ...]] = (
        "debt",
        "earned",
        "lp_balance",
        "rai_lp_balance",
        "reward_per_weight_stored",
        "staking_weight",
    )
    NON_NEGATIVE_FIELDS: ClassVar[tuple[str, ...]] = (
        "debt",
        "rai_lp_balance",
        "staking_weight",
    )


def _check_field(address: str, field: str, value: Any, *, non_negative: bool) -> None:
    if value is None:
        raise IncompleteUserRecord(address=address, field=field)
    if not isinstance(value, Decimal) or not value.is_finite():
        raise IncompleteUserRecord(address=address, field=field, reason=f"not a number ({value!r})")
    if non_negative and value < ZERO:
        raise IncompleteUserRecord(address=address, field=field, reason=f"negative ({value})")


def validate_user_record(record: UserRecord) -> None:
    """
    Raise `IncompleteUserRecord` unless every numeric field is a finite decimal, and the debt,
    balance and weight are non-negative.
    """

    for field in UserRecord.NUMERIC_FIELDS:
        _check_field(
            record.address,
            field,
            getattr(record, field, None),
            non_negative=field in UserRecord.NON_NEGATIVE_FIELDS,
        )


@dataclasses.dataclass(slots=True, kw_only=True)
class PartialUserRecord:
    """
    A user record during the fold, before the staking weight is known.

    Merge policy by field:
        - `lp_balance`, `rai_lp_balance`: overwritten by each balance entry
        - `debt`: incremented by each debt entry
        - `earned`, `reward_per_weight_stored`: left at zero, owned by the reward accrual process
    """

    address: ChecksumAddress
    debt: Decimal = ZERO
    earned: Decimal = ZERO
    lp_balance: Decimal = ZERO
    rai_lp_balance: Decimal = ZERO
    reward_per_weight_stored: Decimal = ZERO

    def merge_balance(self, entry: RawBalanceEntry) -> None:
        self.lp_balance = entry.lp_balance
        self.rai_lp_balance = entry.rai_lp_balance

    def merge_debt(self, entry: RawDebtEntry) -> None:
        with localcontext(prec=DECIMAL_PRECISION):
            self.debt += entry.debt

    def finalize(self) -> UserRecord:
        """
        Derive the staking weight and promote to a validated `UserRecord`.
        """

        # The weight is undefined if either input is, so check them before comparing
        for field in ("debt", "rai_lp_balance"):
            _check_field(self.address, field, getattr(self, field), non_negative=True)

        record = UserRecord(
            address=self.address,
            debt=self.debt,
            earned=self.earned,
            lp_balance=self.lp_balance,
            rai_lp_balance=self.rai_lp_balance,
            reward_per_weight_stored=self.reward_per_weight_stored,
            staking_weight=min(self.debt, self.rai_lp_balance),
        )
        validate_user_record(record)
        return record


_SNAPSHOT_ADAPTER = TypeAdapter(dict[str, UserRecord])


def snapshot_to_json(snapshot: Mapping[ChecksumAddress, UserRecord], *, indent: int = 2) -> bytes:
    """
    Serialize a snapshot to JSON. Decimal values are written as strings to preserve precision.
    """

    return _SNAPSHOT_ADAPTER.dump_json(dict(snapshot), indent=indent)
