"""Operator CLI — bootstrap admins and bulk-load question banks from CSV files.

Usage:
    skillsharp create-admin admin@example.com --full-name "Site Admin"
    skillsharp import-mcqs <chapter-id> ./questions.csv --author-email admin@example.com
"""

import asyncio
from pathlib import Path
from uuid import UUID

import click

from skillsharp.config import get_settings
from skillsharp.core.errors import CsvImportError, SkillSharpError
from skillsharp.db.session import session_scope
from skillsharp.infrastructure.observability import setup_logging
from skillsharp.services import accounts, content


@click.group()
def cli():
    settings = get_settings()
    setup_logging(settings.log_level, "text")


@cli.command("create-admin")
@click.argument("email")
@click.option("--password", default=None, help="Password for a new admin (prompted when omitted).")
@click.option("--full-name", default=None, help="Display name for a new admin.")
def create_admin(email, password, full_name):
    """Create an admin account, or grant admin to an existing account.

    An existing account keeps its password.
    """

    async def run():
        async with session_scope(get_settings().database_url) as db:
            secret = password
            if secret is None and not await accounts.get_profile_by_email(db, email):
                secret = click.prompt("Password", hide_input=True, confirmation_prompt=True)
            return await accounts.ensure_admin(db, email, secret, full_name)

    try:
        profile, created = asyncio.run(run())
    except SkillSharpError as e:
        raise click.ClickException(e.message)
    if created:
        click.echo(f"Created {profile.email} ({profile.id})")
        return
    click.echo(f"Granted admin to {profile.email} ({profile.id})")
    if password:
        click.echo("Existing account: password not changed.", err=True)


@cli.command("import-mcqs")
@click.argument("chapter_id", type=click.UUID)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--author-email", required=True, help="Existing profile recorded as creator.")
def import_mcqs(chapter_id: UUID, path: Path, author_email: str):
    """Import a CSV of MCQs into a chapter. Nothing is written if any row is invalid."""

    async def run():
        async with session_scope(get_settings().database_url) as db:
            author = await accounts.get_profile_by_email(db, author_email)
            if not author:
                raise click.ClickException(f"No account for {author_email}")
            return await content.import_chapter_csv(db, chapter_id, path.read_bytes(), author.id)

    try:
        mcqs = asyncio.run(run())
    except CsvImportError as e:
        for row in e.row_errors:
            click.echo(f"  line {row['line']}: {row['message']}", err=True)
        raise click.ClickException(e.message)
    except SkillSharpError as e:
        raise click.ClickException(e.message)
    click.echo(f"Imported: {len(mcqs)}")


if __name__ == "__main__":
    cli()
