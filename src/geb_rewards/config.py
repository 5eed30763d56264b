import tomllib
from pathlib import Path
from typing import Annotated, Literal

import tomlkit
from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    HttpUrl,
    PlainSerializer,
    WebsocketUrl,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from geb_rewards.checksum_cache import get_checksum_address
from geb_rewards.logging import logger

CONFIG_DIR = Path.home() / ".config" / "geb_rewards"
CONFIG_FILE = CONFIG_DIR / "config.toml"

# RAI/ETH Uniswap V2 pair, RAI is token0
DEFAULT_POOL_ADDRESS = "0x8aE720a71622e824F576b4A8C03031066548A3B1"

Address = Annotated[str, AfterValidator(get_checksum_address)]
SerializedPath = Annotated[
    Path,
    PlainSerializer(lambda path: str(path.absolute()), return_type=str),
]


class SubgraphSettings(BaseModel):
    geb_url: HttpUrl = HttpUrl(
        "https://subgraph.reflexer.finance/subgraphs/name/reflexer-labs/rai"
    )
    uniswap_url: HttpUrl = HttpUrl(
        "https://api.thegraph.com/subgraphs/name/uniswap/uniswap-v2"
    )
    page_size: int = Field(default=1000, gt=0, le=1000)
    timeout: float = Field(default=60.0, gt=0)


class PoolSettings(BaseModel):
    address: Address = DEFAULT_POOL_ADDRESS
    tracked_reserve_index: Literal[0, 1] = 0
    state_source: Literal["subgraph", "rpc"] = "subgraph"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GEB_REWARDS_",
        env_nested_delimiter="__",
    )

    subgraph: SubgraphSettings = SubgraphSettings()
    pool: PoolSettings = PoolSettings()
    collateral_type: str = "ETH-A"
    exclusion_list: SerializedPath | None = None
    rpc: HttpUrl | WebsocketUrl | SerializedPath | None = None

    @field_validator("exclusion_list", "rpc", mode="after")
    def expand_paths(
        cls,  # noqa: N805
        value: HttpUrl | WebsocketUrl | Path | None,
    ) -> HttpUrl | WebsocketUrl | Path | None:
        """
        Convert file paths to an absolute reference, leaving HTTP and WS URLs as-is.
        """

        return value.expanduser().absolute() if isinstance(value, Path) else value


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    if not config_path.parent.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created a configuration directory at {config_path.parent}.")

    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(mode="json", exclude_none=True),
        ),
    )


settings = load_config_from_file(CONFIG_FILE) if CONFIG_FILE.exists() else Settings()
