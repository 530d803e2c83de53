"""Administrative command-line interface."""

from __future__ import annotations

import sys
from pathlib import Path

import click
import structlog
import uvicorn
from safir.asyncio import run_with_asyncio
from safir.click import display_help
from safir.dependencies.http_client import http_client_dependency

from .dependencies.config import config_dependency
from .factory import Factory
from .main import create_openapi

__all__ = [
    "delete_all_data",
    "help",
    "lookup",
    "main",
    "openapi_schema",
    "run",
]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """Administrative command-line interface for steamfriends."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic)


@main.command()
@click.option(
    "--config-path",
    envvar="STEAMFRIENDS_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Application configuration file.",
)
@run_with_asyncio
async def delete_all_data(*, config_path: Path | None) -> None:
    """Delete all stored friend records.

    The next lookup of each user will fetch a fresh friend list from Steam.
    """
    if config_path:
        config_dependency.set_config_path(config_path)
    config = await config_dependency()
    logger = structlog.get_logger("steamfriends")
    logger.debug("Starting to delete all data")
    async with Factory.standalone(config) as factory:
        store = factory.create_friend_record_store()
        await store.delete_all()
    await http_client_dependency.aclose()
    logger.debug("Finished deleting data")


@main.command()
@click.argument("user_id")
@click.option(
    "--config-path",
    envvar="STEAMFRIENDS_CONFIG_PATH",
    type=click.Path(path_type=Path),
    default=None,
    help="Application configuration file.",
)
@run_with_asyncio
async def lookup(*, user_id: str, config_path: Path | None) -> None:
    """Show the stored friend record of a user.

    Only the record store is consulted.  No request is made to Steam.
    """
    if config_path:
        config_dependency.set_config_path(config_path)
    config = await config_dependency()
    async with Factory.standalone(config) as factory:
        store = factory.create_friend_record_store()
        record = await store.get(user_id)
    await http_client_dependency.aclose()
    if not record:
        raise click.ClickException(f"No friend record for {user_id}")
    sys.stdout.write(record.model_dump_json(indent=2) + "\n")


@main.command()
@click.option(
    "--output",
    default=None,
    type=click.Path(path_type=Path),
    help="Output path (output to stdout if not given).",
)
def openapi_schema(*, output: Path | None) -> None:
    """Generate the OpenAPI schema."""
    schema = create_openapi()
    if output:
        output.parent.mkdir(exist_ok=True)
        output.write_text(schema)
    else:
        sys.stdout.write(schema)


@main.command()
@click.option(
    "--port", default=8080, type=int, help="Port to run the application on."
)
def run(*, port: int) -> None:
    """Run the application (for testing only)."""
    uvicorn.run(
        "steamfriends.main:create_app",
        factory=True,
        port=port,
        reload=True,
        reload_dirs=["src"],
    )
