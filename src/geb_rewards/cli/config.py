import click
import tomlkit
from pydantic import TypeAdapter

from geb_rewards.cli import cli
from geb_rewards.config import CONFIG_FILE, Settings, save_config_to_file, settings


@cli.group()
def config() -> None:
    """
    Configuration commands
    """


@config.command("show")
@click.option(
    "--json",
    "output_format",
    flag_value="json",
    type=str,
    help="Show configuration in JSON format",
)
@click.option(
    "--toml",
    "output_format",
    flag_value="toml",
    type=str,
    help="Show configuration in TOML format (default)",
    default=True,
)
def config_show(output_format: str) -> None:
    """
    Display the current configuration in JSON or TOML (default) format.
    """

    match output_format:
        case "json":
            click.echo(
                TypeAdapter(dict).dump_json(
                    settings.model_dump(mode="json"),
                    indent=2,
                ),
            )
        case "toml":
            click.echo(
                tomlkit.dumps(
                    settings.model_dump(mode="json", exclude_none=True),
                ),
            )
        case _:
            ...


@config.command("init")
def config_init() -> None:
    """
    Write a configuration file with default values.
    """

    if CONFIG_FILE.exists() and not click.confirm(
        f"An existing configuration was found at {CONFIG_FILE}. Do you want to overwrite it?",
        default=False,
    ):
        raise click.Abort

    save_config_to_file(Settings(), CONFIG_FILE)
    click.echo(f"Created a configuration file at {CONFIG_FILE}.")
