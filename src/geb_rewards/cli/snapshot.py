import asyncio
from pathlib import Path

import click

from geb_rewards.cli import cli
from geb_rewards.config import settings
from geb_rewards.exceptions import GebRewardsError
from geb_rewards.snapshot import compute_initial_state, snapshot_to_json


@cli.command("snapshot")
@click.argument("start_block", type=click.IntRange(min=0))
@click.argument("end_block", type=click.IntRange(min=0))
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    default=None,
    help="Write the snapshot to this file instead of standard output",
)
def snapshot(start_block: int, end_block: int, output_path: Path | None) -> None:
    """
    Compute the initial staking state for the reward period from START_BLOCK to END_BLOCK.
    """

    try:
        users = asyncio.run(
            compute_initial_state(start_block, end_block, config=settings),
        )
    except GebRewardsError as exc:
        raise click.ClickException(exc.message or str(exc)) from exc

    serialized = snapshot_to_json(users)
    if output_path is None:
        click.echo(serialized)
    else:
        output_path.write_bytes(serialized)
        click.echo(f"Wrote initial state for {len(users)} users to {output_path}", err=True)
