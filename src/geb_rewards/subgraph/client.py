from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any, Self

import aiohttp
import ujson

from geb_rewards.exceptions import GebRewardsValueError, SubgraphQueryError, SubgraphResponseError
from geb_rewards.logging import logger
from geb_rewards.subgraph.queries import PAGE_SIZE, build_query
from geb_rewards.types.aliases import BlockNumber


class SubgraphClient:
    """
    An asynchronous client for a GraphQL endpoint served by The Graph.

    Failures are not retried. Transport and HTTP status errors are raised as `SubgraphQueryError`,
    and responses carrying a GraphQL `errors` payload are raised as `SubgraphResponseError`.

    An `aiohttp.ClientSession` may be shared between clients by passing it at construction, in
    which case the caller is responsible for closing it. Otherwise the client creates a session on
    first use and closes it in `close()` or on exit from an `async with` block.
    """

    def __init__(
        self,
        url: str,
        *,
        page_size: int = PAGE_SIZE,
        timeout: float = 60.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        if not url.startswith(("http://", "https://")):
            raise GebRewardsValueError(message=f"Invalid subgraph URL {url!r}")
        if page_size <= 0:
            raise GebRewardsValueError(message="Page size must be positive.")

        self.url = url
        self.page_size = page_size
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.url!r})"

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(raise_for_status=True)
        return self._session

    async def query(self, query: str) -> dict[str, Any]:
        """
        Execute a query and return the `data` member of the response.
        """

        logger.debug(f"Querying {self.url}: {query}")

        try:
            async with self._get_session().post(
                url=self.url,
                json={"query": query},
                timeout=self.timeout,
            ) as resp:
                resp.raise_for_status()
                payload = await resp.json(
                    # Some endpoints omit or return an invalid MIME type, so use None to bypass
                    # the check in the `json` method
                    content_type=None,
                    loads=ujson.loads,
                )
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise SubgraphQueryError(url=self.url, error=str(exc) or type(exc).__name__) from exc

        if not isinstance(payload, dict):
            raise SubgraphResponseError(url=self.url, errors=[f"Unexpected response {payload!r}"])
        if errors := payload.get("errors"):
            raise SubgraphResponseError(url=self.url, errors=errors)
        if (data := payload.get("data")) is None:
            raise SubgraphResponseError(url=self.url, errors=["Response has no data"])

        return data

    async def fetch_entity(
        self,
        entity: str,
        fields: Sequence[str],
        *,
        entity_id: str | None = None,
        where: Mapping[str, Any] | None = None,
        block_number: BlockNumber | None = None,
    ) -> Any:
        """
        Fetch a single page (or a single entity, when looked up by ID) without pagination.
        """

        data = await self.query(
            build_query(
                entity,
                fields,
                entity_id=entity_id,
                where=where,
                block_number=block_number,
            )
        )
        try:
            return data[entity]
        except KeyError:
            raise SubgraphResponseError(
                url=self.url, errors=[f"Response is missing entity {entity!r}"]
            ) from None

    async def fetch_paginated(
        self,
        entity: str,
        fields: Sequence[str],
        *,
        where: Mapping[str, Any] | None = None,
        block_number: BlockNumber | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch every record of `entity` matching the filter, at the given block.

        Pages are requested sequentially with an increasing `skip` offset, and the loop ends at the
        first page holding fewer than `page_size` records.
        """

        records: list[dict[str, Any]] = []
        skip = 0

        while True:
            data = await self.query(
                build_query(
                    entity,
                    fields,
                    where=where,
                    first=self.page_size,
                    skip=skip,
                    block_number=block_number,
                )
            )
            try:
                page = data[entity]
            except KeyError:
                raise SubgraphResponseError(
                    url=self.url, errors=[f"Response is missing entity {entity!r}"]
                ) from None

            records.extend(page)
            logger.debug(f"Fetched {len(page)} {entity} at offset {skip}")

            if len(page) < self.page_size:
                return records

            skip += self.page_size
