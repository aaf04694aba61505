# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/gasflow/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Idempotent bootstrap: creates missing tables, seeds the cylinder catalog,
#   and creates the admin account from ADMIN_EMAIL / ADMIN_PASSWORD.
# - python -m flask system seed-cylinders
#   Seed the cylinder catalog only.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
#   List all accounts with role and active status.
# - python -m flask users create --name "Gupta Gas" --email gupta@example.com --password "Password123!" [--admin]
#   Create a retailer (or, with --admin, an admin) account.
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --days 30
#   Delete expired and revoked sessions older than the retention window.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import AppError
from .extensions import db
from .models import ROLE_ADMIN, ROLE_USER, User
from .services.auth_service import create_user, ensure_admin
from .services.catalog_service import seed_cylinder_types
from .services.session_service import cleanup_expired_sessions


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize GasFlow: tables, cylinder catalog and the admin account.

    SECURITY: Change the admin password immediately in production!
    """
    click.echo("START Initializing GasFlow...")

    db.create_all()
    click.echo("PASS Tables ready")

    created = seed_cylinder_types()
    click.echo(f"PASS Cylinder catalog seeded ({created} new types)")

    email = current_app.config["ADMIN_EMAIL"]
    try:
        admin, was_created = ensure_admin(
            email=email,
            password=current_app.config["ADMIN_PASSWORD"],
            name=current_app.config["ADMIN_NAME"],
        )
    except AppError as e:
        raise click.ClickException(f"Failed to create admin '{email}': {e.message}")

    if was_created:
        click.echo(f"PASS Created admin: {admin.email}")
    else:
        click.echo(f"WARN  Admin '{admin.email}' already exists, skipping...")

    click.echo("DONE GasFlow initialized")


@system_group.command('seed-cylinders')
@with_appcontext
def seed_cylinders():
    """Insert any missing cylinder types (idempotent)."""
    created = seed_cylinder_types()
    click.echo(f"PASS Cylinder catalog seeded ({created} new types)")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User account commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--mobile', default=None, help='10-digit mobile number')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--admin', 'is_admin', is_flag=True, help='Create an ADMIN instead of a retailer')
@with_appcontext
def create_user_cli(name, email, mobile, password, is_admin):
    """
    Create a new account.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        user = create_user(
            name=name,
            email=email,
            password=password,
            mobile_number=mobile,
            role=ROLE_ADMIN if is_admin else ROLE_USER,
        )
    except AppError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created {user.role} user: {user.email} (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Role':<7} {'Name':<25} {'Email':<32} {'Active'}")
    click.echo("="*80)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.role:<7} {user.name[:24]:<25} {user.email[:31]:<32} {active_str}")

    click.echo("="*80 + "\n")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(days):
    """Delete expired and revoked sessions older than --days."""
    deleted = cleanup_expired_sessions(days=days)
    click.echo(f"Deleted {deleted} sessions older than {days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
