from typing import Any

import pytest
from aiohttp import test_utils, web

from geb_rewards.exceptions import (
    GebRewardsValueError,
    SubgraphQueryError,
    SubgraphResponseError,
)
from geb_rewards.subgraph.client import SubgraphClient


class PagedSubgraphClient(SubgraphClient):
    """
    Serves `total` records of a single entity in pages, without a network round trip.
    """

    def __init__(self, entity: str, total: int, page_size: int) -> None:
        super().__init__("https://example.com/subgraph", page_size=page_size)
        self.entity = entity
        self.total = total
        self.queries: list[str] = []

    async def query(self, query: str) -> dict[str, Any]:
        self.queries.append(query)
        skip = int(query.split("skip: ")[1].split(",")[0])
        count = max(0, min(self.page_size, self.total - skip))
        return {self.entity: [{"id": str(skip + i)} for i in range(count)]}


def test_invalid_url():
    with pytest.raises(GebRewardsValueError, match="Invalid subgraph URL"):
        SubgraphClient("ftp://example.com")


def test_invalid_page_size():
    with pytest.raises(GebRewardsValueError):
        SubgraphClient("https://example.com", page_size=0)


@pytest.mark.parametrize(
    ("total", "expected_queries"),
    [
        (0, 1),
        (5, 1),
        (10, 2),
        (25, 3),
        (30, 4),
    ],
)
async def test_fetch_paginated_stops_on_short_page(total, expected_queries):
    client = PagedSubgraphClient("safes", total=total, page_size=10)

    records = await client.fetch_paginated("safes", ("id",), where={"debt_gt": 0}, block_number=5)

    assert [record["id"] for record in records] == [str(i) for i in range(total)]
    assert len(client.queries) == expected_queries
    for page_number, query in enumerate(client.queries):
        assert f"first: 10, skip: {page_number * 10}," in query
        assert "block: {number: 5}" in query


async def test_fetch_paginated_missing_entity():
    class EmptyClient(SubgraphClient):
        async def query(self, query: str) -> dict[str, Any]:
            return {}

    client = EmptyClient("https://example.com")
    with pytest.raises(SubgraphResponseError, match="missing entity"):
        await client.fetch_paginated("safes", ("id",))


def _make_app(response: web.Response | dict[str, Any], requests: list[Any]) -> web.Application:
    async def handler(request: web.Request) -> web.StreamResponse:
        requests.append(await request.json())
        if isinstance(response, web.Response):
            return response
        return web.json_response(response)

    app = web.Application()
    app.router.add_post("/subgraph", handler)
    return app


async def test_query_returns_data():
    requests: list[Any] = []
    app = _make_app({"data": {"safes": [{"debt": "1"}]}}, requests)

    async with test_utils.TestServer(app) as server:
        async with SubgraphClient(str(server.make_url("/subgraph"))) as client:
            data = await client.query("{safes {debt}}")

    assert data == {"safes": [{"debt": "1"}]}
    assert requests == [{"query": "{safes {debt}}"}]


async def test_query_graphql_errors():
    app = _make_app({"errors": [{"message": "Invalid skip"}]}, [])

    async with test_utils.TestServer(app) as server:
        async with SubgraphClient(str(server.make_url("/subgraph"))) as client:
            with pytest.raises(SubgraphResponseError, match="Invalid skip"):
                await client.query("{safes {debt}}")


async def test_query_without_data():
    app = _make_app({"data": None}, [])

    async with test_utils.TestServer(app) as server:
        async with SubgraphClient(str(server.make_url("/subgraph"))) as client:
            with pytest.raises(SubgraphResponseError, match="no data"):
                await client.query("{safes {debt}}")


async def test_query_http_error():
    app = _make_app(web.Response(status=502, text="Bad Gateway"), [])

    async with test_utils.TestServer(app) as server:
        url = str(server.make_url("/subgraph"))
        async with SubgraphClient(url) as client:
            with pytest.raises(SubgraphQueryError) as exc_info:
                await client.query("{safes {debt}}")

    assert exc_info.value.url == url


async def test_fetch_entity():
    app = _make_app({"data": {"collateralType": {"accumulatedRate": "1.05"}}}, [])

    async with test_utils.TestServer(app) as server:
        async with SubgraphClient(str(server.make_url("/subgraph"))) as client:
            collateral = await client.fetch_entity(
                "collateralType", ("accumulatedRate",), entity_id="ETH-A", block_number=1
            )

    assert collateral == {"accumulatedRate": "1.05"}
