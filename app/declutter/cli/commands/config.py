"""Configuration commands.

Provides commands to show, create and locate the configuration file
holding default scan filters and scorer weights.
"""

from typing import Annotated

import tomli_w
import typer

from declutter.cli.options import load_settings
from declutter.core.config import ConfigError, DeclutterConfig, save_config
from declutter.core.paths import get_config_path
from declutter.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and create the configuration file.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective configuration as TOML."""
    settings = load_settings()
    if not get_config_path().exists():
        print_info("No config file found, showing defaults.")
    console.print(
        tomli_w.dumps(settings.model_dump(mode="json", exclude_none=True)),
        markup=False,
        highlight=False,
    )


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        saved = save_config(DeclutterConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config written to {saved}")


@app.command()
def path() -> None:
    """Print the location of the config file."""
    typer.echo(str(get_config_path()))
