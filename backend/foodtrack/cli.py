# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/foodtrack/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv and set JWT_SECRET.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db upgrade
#   Apply Alembic migrations (Flask-Migrate).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Organizations:
# - python -m flask orgs list
#   List all organizations with their live token counts.
# - python -m flask orgs create --name "Acme Foods" --email ops@acme.test --password "..."
#   Create an organization that can log in.
#
# Maintenance:
# - python -m flask tokens cleanup --retention-days 30
#   Delete revoked/expired access tokens older than the retention window.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .models import AccessToken, Organization
from .services import auth_service, maintenance_service
from .time_utils import utcnow


@click.group('system')
def system_group():
    """Schema bootstrap commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """Drop and recreate all tables. Deletes every row."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('orgs')
def orgs_group():
    """Organization (tenant) management."""


@orgs_group.command('list')
@with_appcontext
def list_orgs():
    """List all organizations."""
    orgs = db.session.query(Organization).order_by(Organization.id).all()
    if not orgs:
        click.echo("No organizations found.")
        return

    now = utcnow()
    click.echo("\n" + "=" * 80)
    click.echo(f"{'ID':<5} {'Name':<30} {'Email':<32} {'Live tokens'}")
    click.echo("=" * 80)
    for org in orgs:
        live = db.session.query(AccessToken).filter(
            AccessToken.org_id == org.id,
            AccessToken.is_revoked.is_(False),
            AccessToken.expires_at > now,
        ).count()
        click.echo(f"{org.id:<5} {org.name[:30]:<30} {org.email[:32]:<32} {live}")
    click.echo("=" * 80 + "\n")


@orgs_group.command('create')
@click.option('--name', required=True, help='Organization name')
@click.option('--email', required=True, help='Login email (unique)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_org_cli(name, email, password):
    """Create an organization with login credentials."""
    try:
        org, _ = auth_service.register_organization(
            {"name": name, "email": email, "password": password}
        )
    except ApiError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Created organization {org.name} (ID: {org.id})")


@click.group('tokens')
def tokens_group():
    """Access token maintenance."""


@tokens_group.command('cleanup')
@click.option('--retention-days', type=int, default=None,
              help='Keep revoked/expired tokens younger than this (default: TOKEN_RETENTION_DAYS)')
@with_appcontext
def cleanup_tokens_cli(retention_days):
    """Delete revoked or expired access tokens older than the retention window."""
    if retention_days is None:
        retention_days = current_app.config.get("TOKEN_RETENTION_DAYS", 30)
    deleted = maintenance_service.cleanup_access_tokens(retention_days=retention_days)
    click.echo(f"Deleted {deleted} access tokens older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(orgs_group)
    app.cli.add_command(tokens_group)
