import logging

import click

from geb_rewards.logging import logger
from geb_rewards.version import __version__


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
def cli(*, verbose: bool) -> None:
    if verbose:
        logger.setLevel(logging.DEBUG)


from . import config, snapshot  # noqa: F401, E402
