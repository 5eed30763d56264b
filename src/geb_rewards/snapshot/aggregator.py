from collections.abc import Iterable

from eth_typing import ChecksumAddress

from geb_rewards.exceptions import GebRewardsValueError
from geb_rewards.functions import gather_or_cancel
from geb_rewards.logging import logger
from geb_rewards.snapshot.balances import BalanceNormalizer
from geb_rewards.snapshot.debts import DebtNormalizer
from geb_rewards.snapshot.types import PartialUserRecord, RawBalanceEntry, RawDebtEntry, UserRecord
from geb_rewards.sources.protocols import ExclusionProvider
from geb_rewards.types.aliases import BlockNumber


def get_or_create_user(
    address: ChecksumAddress,
    users: dict[ChecksumAddress, PartialUserRecord],
) -> PartialUserRecord:
    try:
        return users[address]
    except KeyError:
        user = users[address] = PartialUserRecord(address=address)
        return user


def fold_entries(
    balances: Iterable[RawBalanceEntry],
    debts: Iterable[RawDebtEntry],
) -> dict[ChecksumAddress, PartialUserRecord]:
    """
    Combine balance and debt entries into one partial record per address.

    Balances are assigned and debts are summed, see `PartialUserRecord` for the merge policy.
    """

    users: dict[ChecksumAddress, PartialUserRecord] = {}

    seen_balances: set[ChecksumAddress] = set()
    for balance in balances:
        if balance.address in seen_balances:
            logger.warning(f"Duplicate LP token balance for {balance.address}, keeping the last")
        seen_balances.add(balance.address)
        get_or_create_user(balance.address, users).merge_balance(balance)

    for debt in debts:
        get_or_create_user(debt.address, users).merge_debt(debt)

    return users


def apply_exclusions(
    users: dict[ChecksumAddress, PartialUserRecord],
    excluded: Iterable[ChecksumAddress],
) -> None:
    for address in excluded:
        if users.pop(address, None) is not None:
            logger.debug(f"Excluded {address}")


class InitialStateAggregator:
    """
    Builds the initial staking state for a reward period.

    The balance and debt pipelines run concurrently. Their results are folded into one record per
    address, excluded addresses are removed, and each remaining record receives its staking weight
    and is validated. Any failure aborts the whole snapshot.
    """

    def __init__(
        self,
        balance_normalizer: BalanceNormalizer,
        debt_normalizer: DebtNormalizer,
        exclusion_provider: ExclusionProvider,
    ) -> None:
        self.balance_normalizer = balance_normalizer
        self.debt_normalizer = debt_normalizer
        self.exclusion_provider = exclusion_provider

    async def compute_initial_state(
        self,
        start_block: BlockNumber,
        end_block: BlockNumber,
    ) -> dict[ChecksumAddress, UserRecord]:
        if end_block < start_block:
            raise GebRewardsValueError(message="End block cannot be earlier than start block.")

        logger.info("Fetch initial state...")

        balances, debts = await gather_or_cancel(
            self.balance_normalizer.fetch_balances(start_block),
            self.debt_normalizer.fetch_debts(start_block, end_block),
        )
        logger.info(f"  Fetched {len(balances)} LP token balances")
        logger.info(f"  Fetched {len(debts)} debt balances")

        users = fold_entries(balances, debts)
        apply_exclusions(users, await self.exclusion_provider.get_exclusion_set())

        snapshot = {address: user.finalize() for address, user in users.items()}

        logger.info(f"Finished loading initial state for {len(snapshot)} users")
        return snapshot
