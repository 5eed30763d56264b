from collections.abc import Iterable
from pathlib import Path

from eth_typing import ChecksumAddress

from geb_rewards.checksum_cache import get_checksum_address
from geb_rewards.logging import logger


class StaticExclusionProvider:
    def __init__(self, addresses: Iterable[str] = ()) -> None:
        self.addresses = frozenset(get_checksum_address(address) for address in addresses)

    async def get_exclusion_set(self) -> set[ChecksumAddress]:
        return set(self.addresses)


class FileExclusionProvider:
    """
    Loads excluded addresses from a text file holding one address per line. Blank lines and
    anything following a `#` are ignored.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    async def get_exclusion_set(self) -> set[ChecksumAddress]:
        excluded: set[ChecksumAddress] = set()
        for line in self.path.read_text().splitlines():
            if address := line.split("#", maxsplit=1)[0].strip():
                excluded.add(get_checksum_address(address))

        logger.debug(f"Loaded {len(excluded)} excluded addresses from {self.path}")
        return excluded
