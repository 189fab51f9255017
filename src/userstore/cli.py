"""Command-line interface for the user store.

Provides commands for provisioning the user table and inspecting the
configured store.
"""

import asyncio
from typing import NoReturn

import click

from userstore.core.config import StoreOptions, get_settings
from userstore.core.logging import configure_logging
from userstore.domain.entities.user_query import UserQuery
from userstore.infrastructure.persistence.backend import SQLAlchemyBackend
from userstore.infrastructure.persistence.database import get_db_manager
from userstore.infrastructure.persistence.repositories import UserRepository


def _repository() -> UserRepository:
    db = get_db_manager()
    backend = SQLAlchemyBackend(session_factory=db.session_factory)
    return UserRepository(backend, StoreOptions.from_settings(db.settings))


@click.group()
@click.version_option(version="0.1.0", prog_name="userstore")
def cli() -> None:
    """userstore - user persistence with tokenized sensitive columns."""


@cli.command("init-db")
def init_db() -> None:
    """Create the user table and its indexes if they do not exist."""
    settings = get_settings()
    configure_logging(settings)

    async def initialize() -> None:
        try:
            await _repository().auto_migrate()
            click.echo(f"User table '{settings.user_table_name}' is ready.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command()
@click.option("--status", type=str, default="", help="Only count users with this status")
@click.option(
    "--with-soft-deleted",
    is_flag=True,
    default=False,
    help="Include soft-deleted users",
)
def count(status: str, with_soft_deleted: bool) -> None:
    """Count users."""
    settings = get_settings()
    configure_logging(settings)

    query = UserQuery().set_status(status).set_with_soft_deleted(with_soft_deleted)

    async def run() -> None:
        try:
            total = await _repository().count(query)
            click.echo(str(total))
        finally:
            await get_db_manager().disconnect()

    asyncio.run(run())


@cli.command()
def info() -> None:
    """Display the effective store configuration."""
    settings = get_settings()
    options = StoreOptions.from_settings(settings)
    database_url = get_db_manager().engine.url.render_as_string(hide_password=True)
    tokenized = ", ".join(options.tokenized_columns) or "(none)"

    click.echo(f"""
userstore v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}

Database:
  URL:          {database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}

Store:
  Table:        {options.user_table_name}
  Tokenized:    {tokenized}
  Token Prefix: {options.token_prefix}
  Automigrate:  {options.automigrate_enabled}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Entry point for the `userstore` command and `python -m userstore`."""
    cli()


if __name__ == "__main__":
    main()
