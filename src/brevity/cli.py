"""Command-line interface for Brevity.

This module provides the CLI commands for running and managing
the Brevity application.
"""

import asyncio
from typing import NoReturn

import click

from brevity.core.config import get_settings
from brevity.core.logging import configure_logging, get_logger
from brevity.domain.entities.account import AccountStatus, OAuthProvider


@click.group()
@click.version_option(version="0.1.0", prog_name="Brevity")
def cli() -> None:
    """Brevity - account lifecycle and authentication backend."""


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload/--no-reload",
    default=None,
    help="Enable auto-reload (defaults to on in development)",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool | None) -> None:
    """Start the Brevity server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if reload is None:
        reload = settings.is_development

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting Brevity server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "brevity.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def init_db(force: bool) -> None:
    """Initialize the database.

    Creates all database tables. Use this only in development.
    In production, use migrations instead.
    """
    from brevity.infrastructure.persistence.database import get_db_manager, init_database

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize() -> None:
        try:
            await init_database()
            click.echo("Database initialized successfully.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command()
@click.option("--email", type=str, required=True, help="Account email")
@click.option("--display-name", type=str, required=True, help="Display name")
@click.option(
    "--provider",
    type=click.Choice([p.value for p in OAuthProvider]),
    default=OAuthProvider.GOOGLE.value,
    show_default=True,
)
@click.option("--provider-id", type=str, required=True, help="Identity at the provider")
def create_oauth_user(email: str, display_name: str, provider: str, provider_id: str) -> None:
    """Create an active account that signs in only through an external provider."""
    from brevity.core.exceptions import BrevityError
    from brevity.domain.services.auth_service import AuthService
    from brevity.infrastructure.persistence.database import get_db_manager, init_database
    from brevity.infrastructure.services.email_service import EmailService

    settings = get_settings()
    configure_logging(settings)

    async def create() -> None:
        db = get_db_manager()
        try:
            await init_database()
            async with db.session() as session:
                auth = AuthService.for_session(session, EmailService.from_settings(settings))
                account = await auth.create_oauth_account(
                    display_name=display_name,
                    email=email,
                    provider=provider,
                    provider_id=provider_id,
                )
            click.echo(
                f"\nAccount created successfully!\n"
                f"  Account ID:   {account.id}\n"
                f"  Email:        {account.email}\n"
                f"  Provider:     {provider} ({provider_id})\n"
                f"  OAuth only:   {account.is_oauth_only()}\n"
            )
        except BrevityError as e:
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(1)
        finally:
            await db.disconnect()

    asyncio.run(create())


@cli.command()
@click.argument("email")
@click.option(
    "--provider",
    type=click.Choice([p.value for p in OAuthProvider]),
    required=True,
)
@click.option("--provider-id", type=str, required=True, help="Identity at the provider")
def link_oauth(email: str, provider: str, provider_id: str) -> None:
    """Bind an external provider identity to the account registered with EMAIL."""
    from brevity.core.exceptions import BrevityError
    from brevity.domain.services.auth_service import AuthService
    from brevity.infrastructure.persistence.database import get_db_manager
    from brevity.infrastructure.services.email_service import EmailService

    settings = get_settings()
    configure_logging(settings)

    async def link() -> None:
        db = get_db_manager()
        try:
            async with db.session() as session:
                auth = AuthService.for_session(session, EmailService.from_settings(settings))
                account = await auth.link_oauth_provider(email, provider, provider_id)
            providers = ", ".join(
                f"{b.provider.value} ({b.provider_id})" for b in account.oauth_providers
            )
            click.echo(f"{account.email}: {providers}")
        except BrevityError as e:
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(1)
        finally:
            await db.disconnect()

    asyncio.run(link())


@cli.command()
@click.argument("email")
def list_sessions(email: str) -> None:
    """Show the refresh token ledger of the account registered with EMAIL."""
    from datetime import datetime, timezone

    from brevity.core.exceptions import BrevityError
    from brevity.domain.services.auth_service import AuthService
    from brevity.infrastructure.persistence.database import get_db_manager
    from brevity.infrastructure.services.email_service import EmailService

    settings = get_settings()
    configure_logging(settings)

    async def show() -> None:
        db = get_db_manager()
        try:
            async with db.session() as session:
                auth = AuthService.for_session(session, EmailService.from_settings(settings))
                account = await auth.account_repo.get_by_email(email)
                entries = await auth.sessions.list_entries(account)
        except BrevityError as e:
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(1)
        finally:
            await db.disconnect()

        if not entries:
            click.echo(f"{account.email}: no sessions")
            return

        now = datetime.now(timezone.utc)
        ttl = auth.sessions.refresh_ttl
        click.echo(f"{account.email}: {len(entries)} session(s)")
        for entry in entries:
            state = "expired" if entry.is_expired(ttl, now) else "live"
            click.echo(f"  {entry.id}  {entry.created_at.isoformat()}  {state}")

    asyncio.run(show())


@cli.command()
@click.argument("email")
@click.argument("status", type=click.Choice([s.value for s in AccountStatus]))
def set_status(email: str, status: str) -> None:
    """Change the status of the account registered with EMAIL."""
    from brevity.core.exceptions import BrevityError
    from brevity.domain.services.auth_service import AuthService
    from brevity.infrastructure.persistence.database import get_db_manager
    from brevity.infrastructure.services.email_service import EmailService

    settings = get_settings()
    configure_logging(settings)

    async def change() -> None:
        db = get_db_manager()
        try:
            async with db.session() as session:
                auth = AuthService.for_session(session, EmailService.from_settings(settings))
                account = await auth.account_repo.get_by_email(email)
                account = await auth.change_status(account.id, AccountStatus(status))
            click.echo(f"{account.email}: {account.status.value}")
        except BrevityError as e:
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(1)
        finally:
            await db.disconnect()

    asyncio.run(change())


@cli.command()
@click.argument("email")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def purge_user(email: str, force: bool) -> None:
    """Physically remove the account registered with EMAIL (development only)."""
    from brevity.infrastructure.persistence.database import get_db_manager
    from brevity.infrastructure.persistence.repositories import AccountRepository

    settings = get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)

    if settings.is_production:
        click.echo("ERROR: purge-user is not available in production.", err=True)
        raise SystemExit(1)

    if not force:
        click.confirm(f"Permanently delete {email} and all its sessions?", abort=True)

    async def purge() -> None:
        db = get_db_manager()
        try:
            async with db.session() as session:
                repo = AccountRepository(session)
                account = await repo.find_by_email(email)
                if account is None:
                    click.echo(f"No account with email {email}", err=True)
                    raise SystemExit(1)
                await repo.purge(account.id)
                await session.commit()
            logger.info("Account purged via CLI", account_id=account.id)
            click.echo(f"Purged {account.email} ({account.id}).")
        finally:
            await db.disconnect()

    asyncio.run(purge())


@cli.command()
def info() -> None:
    """Display Brevity configuration."""
    settings = get_settings()

    click.echo(f"""
Brevity v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}

Database:
  URL:          {settings.database_url}

Security:
  Token Expire: {settings.access_token_expire_minutes} minutes
  Refresh Exp:  {settings.refresh_token_expire_days} days
  Lockout:      {settings.max_login_attempts} attempts, {settings.lock_time_minutes} minutes

Email:
  SMTP Host:    {settings.smtp_host or '(console)'}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    Called by the ``brevity`` command and by ``python -m brevity``.
    """
    cli()


if __name__ == "__main__":
    main()
