from .aggregator import InitialStateAggregator, apply_exclusions, fold_entries, get_or_create_user
from .balances import BalanceNormalizer, check_pool_state, lp_balance_to_rai
from .debts import DebtNormalizer
from .initial_state import build_aggregator, compute_initial_state
from .types import (
    PartialUserRecord,
    RawBalanceEntry,
    RawDebtEntry,
    UserRecord,
    snapshot_to_json,
    validate_user_record,
)

__all__ = (
    "BalanceNormalizer",
    "DebtNormalizer",
    "InitialStateAggregator",
    "PartialUserRecord",
    "RawBalanceEntry",
    "RawDebtEntry",
    "UserRecord",
    "apply_exclusions",
    "build_aggregator",
    "check_pool_state",
    "compute_initial_state",
    "fold_entries",
    "get_or_create_user",
    "lp_balance_to_rai",
    "snapshot_to_json",
    "validate_user_record",
)
