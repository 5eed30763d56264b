from .client import SubgraphClient
from .queries import PAGE_SIZE, build_query, parse_decimal

__all__ = (
    "PAGE_SIZE",
    "SubgraphClient",
    "build_query",
    "parse_decimal",
)
