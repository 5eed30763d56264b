from pathlib import Path

from pydantic import HttpUrl, WebsocketUrl
from web3 import (
    AsyncBaseProvider,
    AsyncHTTPProvider,
    AsyncIPCProvider,
    AsyncWeb3,
    WebSocketProvider,
)
from web3.providers.persistent import PersistentConnectionProvider

from geb_rewards.config import CONFIG_FILE, Settings
from geb_rewards.exceptions import GebRewardsValueError


async def get_async_web3_from_config(config: Settings) -> AsyncWeb3[AsyncBaseProvider]:
    """
    Build a connected `AsyncWeb3` for the RPC endpoint defined in the config.

    Persistent (websocket and IPC) connections must be closed with `close_async_web3`.
    """

    match endpoint := config.rpc:
        case HttpUrl():
            w3: AsyncWeb3[AsyncBaseProvider] = AsyncWeb3(AsyncHTTPProvider(str(endpoint)))
        case WebsocketUrl():
            w3 = await AsyncWeb3(WebSocketProvider(str(endpoint)))
        case Path():
            w3 = await AsyncWeb3(AsyncIPCProvider(str(endpoint)))
        case None:
            raise GebRewardsValueError(
                message=f"An RPC endpoint is not defined in config file {CONFIG_FILE}"
            )

    if not await w3.is_connected():
        await close_async_web3(w3)
        raise GebRewardsValueError(message=f"Web3 instance at {endpoint} is not connected.")

    return w3


async def close_async_web3(w3: AsyncWeb3[AsyncBaseProvider]) -> None:
    if isinstance(w3.provider, PersistentConnectionProvider):
        await w3.provider.disconnect()
