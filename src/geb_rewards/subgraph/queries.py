"""
GraphQL query text builders for The Graph subgraphs.

Only the small subset of the query language needed to select entities is supported: a filter
(`where`), pagination (`first`, `skip`), a single entity lookup (`id`) and time travel to a
historical block (`block: {number: ...}`).
"""

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from geb_rewards.exceptions import GebRewardsTypeError, SubgraphResponseError
from geb_rewards.types.aliases import BlockNumber

PAGE_SIZE = 1000

# Entities and fields read from the GEB subgraph
ERC20_BALANCES = "erc20Balances"
ERC20_BALANCE_FIELDS = ("address", "balance")

SAFES = "safes"
SAFE_FIELDS = ("safeHandler", "debt")

SAFE_HANDLER_OWNERS = "safeHandlerOwners"
SAFE_HANDLER_OWNER_FIELDS = ("id", "owner { id }")

COLLATERAL_TYPE = "collateralType"
COLLATERAL_TYPE_FIELDS = ("accumulatedRate",)

# Entities and fields read from the Uniswap V2 subgraph
UNISWAP_V2_PAIRS = "uniswapV2Pairs"
UNISWAP_V2_PAIR_FIELDS = ("reserve0", "reserve1", "totalSupply")


def format_value(value: Any) -> str:
    """
    Render a Python value as a GraphQL input literal.
    """

    match value:
        case bool():
            return "true" if value else "false"
        case int() | Decimal():
            return str(value)
        case str():
            return f'"{value}"'
        case Mapping():
            return "{" + format_arguments(value) + "}"
        case list() | tuple():
            return "[" + ", ".join(format_value(item) for item in value) + "]"
        case _:
            raise GebRewardsTypeError(
                message=f"Cannot format {type(value).__name__} value {value!r} for a query"
            )


def format_arguments(arguments: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}: {format_value(value)}" for key, value in arguments.items())


def build_query(
    entity: str,
    fields: Sequence[str],
    *,
    entity_id: str | None = None,
    where: Mapping[str, Any] | None = None,
    first: int | None = None,
    skip: int | None = None,
    block_number: BlockNumber | None = None,
) -> str:
    """
    Build a query selecting `fields` from `entity`, e.g.

    `{safes(where: {debt_gt: 0}, first: 1000, skip: 0, block: {number: 11848304}) {debt}}`
    """

    arguments: dict[str, Any] = {}
    if entity_id is not None:
        arguments["id"] = entity_id
    if where:
        arguments["where"] = where
    if first is not None:
        arguments["first"] = first
    if skip is not None:
        arguments["skip"] = skip
    if block_number is not None:
        arguments["block"] = {"number": block_number}

    selection = " ".join(fields)
    if arguments:
        return f"{{{entity}({format_arguments(arguments)}) {{{selection}}}}}"
    return f"{{{entity} {{{selection}}}}}"


def parse_decimal(record: Mapping[str, Any], field: str, *, entity: str, url: str) -> Decimal:
    """
    Read a numeric field from a subgraph record. `BigInt` and `BigDecimal` values arrive as strings.
    """

    try:
        return Decimal(record[field])
    except (KeyError, TypeError, InvalidOperation) as exc:
        raise SubgraphResponseError(
            url=url,
            errors=[f"Invalid {entity}.{field} value {record.get(field)!r}"],
        ) from exc
