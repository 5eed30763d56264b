from decimal import localcontext

from geb_rewards.constants import DECIMAL_PRECISION
from geb_rewards.functions import gather_or_cancel
from geb_rewards.logging import logger
from geb_rewards.snapshot.types import RawDebtEntry
from geb_rewards.sources.protocols import OwnerResolver, PaginatedDataSource, RateOracle
from geb_rewards.subgraph.queries import SAFE_FIELDS, SAFES, parse_decimal
from geb_rewards.types.aliases import BlockNumber


class DebtNormalizer:
    """
    Converts safe debt into rate-adjusted debt attributed to the safe owner.

    Debt and the accumulated rate are measured at the start block, while ownership is resolved at
    the end block, so a safe transferred during the period credits its new owner.
    """

    def __init__(
        self,
        source: PaginatedDataSource,
        owner_resolver: OwnerResolver,
        rate_oracle: RateOracle,
    ) -> None:
        self.source = source
        self.owner_resolver = owner_resolver
        self.rate_oracle = rate_oracle

    async def fetch_debts(
        self,
        start_block: BlockNumber,
        end_block: BlockNumber,
    ) -> list[RawDebtEntry]:
        safes, owners, accumulated_rate = await gather_or_cancel(
            self.source.fetch_paginated(
                SAFES,
                SAFE_FIELDS,
                where={"debt_gt": 0},
                block_number=start_block,
            ),
            self.owner_resolver.resolve_owners(end_block),
            self.rate_oracle.accumulated_rate(start_block),
        )

        debts = []
        for safe in safes:
            safe_handler = safe["safeHandler"].lower()
            if (owner := owners.get(safe_handler)) is None:
                logger.warning(f"Safe handler {safe_handler} has no owner")
                continue

            debt = parse_decimal(safe, "debt", entity=SAFES, url=self.source.url)
            with localcontext(prec=DECIMAL_PRECISION):
                debt *= accumulated_rate

            debts.append(RawDebtEntry(address=owner, debt=debt))

        return debts
