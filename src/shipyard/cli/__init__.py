"""
Shipyard CLI

Operator tooling working on fleet snapshot files: run the strategy executor
for a release and clean up releases left on decommissioned clusters.
"""

from pathlib import Path

import click

from shipyard import __version__
from shipyard.config import LogFormat, load_settings
from shipyard.logging import setup_logging

from .commands import clean, strategy


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML settings file",
)
@click.pass_context
def cli(ctx, verbose, config_file):
    """Shipyard progressive delivery CLI

    Drive releases through their delivery strategies and keep the fleet
    tidy, working on YAML fleet snapshots.
    """
    settings = load_settings(config_file)
    setup_logging(
        settings.service_name,
        "DEBUG" if verbose else settings.log_level,
        enable_json=settings.log_format is LogFormat.JSON,
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


cli.add_command(strategy)
cli.add_command(clean)


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
