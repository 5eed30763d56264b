"""
Data fetching exceptions for the geb_rewards package.

This module contains exceptions raised while retrieving records from a subgraph or a JSON-RPC
endpoint. None of these are retried; they propagate to the caller of the snapshot.
"""

from typing import Any

from geb_rewards.exceptions.base import GebRewardsError


class FetchingError(GebRewardsError):
    """
    Base exception for data fetching errors.
    """


class SubgraphQueryError(FetchingError):
    """
    Raised when a subgraph query could not be delivered or the endpoint returned an HTTP error.
    """

    def __init__(self, url: str, error: str) -> None:
        self.url = url
        self.error = error
        super().__init__(message=f"Subgraph query to {url} failed: {error}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.url, self.error)


class SubgraphResponseError(FetchingError):
    """
    Raised when a subgraph answers with a GraphQL error payload, or without the requested data.
    """

    def __init__(self, url: str, errors: list[Any]) -> None:
        self.url = url
        self.errors = errors
        super().__init__(message=f"Subgraph at {url} returned errors: {errors}")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.url, self.errors)
