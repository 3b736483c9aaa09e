# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/driverpunch/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create any missing tables (idempotent). Prefer `flask db upgrade` in production.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Accounts:
# - python -m flask users create-admin --email admin@example.com --password "secret1"
#   Create an admin account (admin self sign-up is disabled by default).
# - python -m flask users list [--role driver]
#
# Driver directory:
# - python -m flask drivers create --driver-id DRV-001 --name "Sam Carter" [--pin 1234]
# - python -m flask drivers list [--active-only]
# - python -m flask drivers set-pin DRV-001 --pin 1234

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .models.auth import ROLES, ROLE_ADMIN
from .services import auth_service, driver_service
from .services.auth_service import AuthError
from .services.driver_service import DriverError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create any missing tables."""
    click.echo("START Initializing driverpunch database...")
    db.create_all()
    click.echo("PASS Tables ready.")


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

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """Account inspection and bootstrap commands."""


@users_group.command('create-admin')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin_cli(email, password):
    """Create an admin account."""
    try:
        user = auth_service.sign_up(email, password, ROLE_ADMIN, allow_admin=True)
        click.echo(f"PASS Created admin: {user.email} (ID: {user.id})")
    except AuthError as e:
        click.echo(f"FAIL {str(e)}")


@users_group.command('list')
@click.option('--role', type=click.Choice(list(ROLES)), help='Filter by role')
@with_appcontext
def list_users(role):
    """List accounts."""
    query = db.session.query(User)
    if role:
        query = query.filter_by(role=role)
    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<35} {'Role':<8} {'Driver ID':<15} {'Active'}")
    click.echo("="*80)
    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.email:<35} {user.role:<8} {user.driver_id or '-':<15} {active_str}")
    click.echo("="*80 + "\n")


@click.group('drivers')
def drivers_group():
    """Driver directory commands."""


@drivers_group.command('create')
@click.option('--driver-id', required=True, help='External driver identifier')
@click.option('--name', required=True, help='Display name')
@click.option('--email', help='Contact email')
@click.option('--phone', help='Contact phone')
@click.option('--pin', help='Punch PIN (4-6 digits)')
@with_appcontext
def create_driver_cli(driver_id, name, email, phone, pin):
    """Add a driver to the directory."""
    try:
        driver = driver_service.create_driver(
            driver_id=driver_id, name=name, email=email, phone=phone, pin=pin,
        )
        click.echo(f"PASS Created driver {driver.driver_id}: {driver.name} (ID: {driver.id})")
    except DriverError as e:
        click.echo(f"FAIL {str(e)}")


@drivers_group.command('list')
@click.option('--active-only', is_flag=True, help='Hide deactivated drivers')
@with_appcontext
def list_drivers_cli(active_only):
    """List drivers ordered by name."""
    drivers = driver_service.list_drivers(include_inactive=not active_only)
    if not drivers:
        click.echo("No drivers found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Driver ID':<15} {'Name':<30} {'PIN':<5} {'Face':<5} {'Active'}")
    click.echo("="*80)
    for d in drivers:
        click.echo(
            f"{d.id:<5} {d.driver_id:<15} {d.name:<30} "
            f"{'Yes' if d.has_pin else 'No':<5} {'Yes' if d.has_face else 'No':<5} "
            f"{'Yes' if d.is_active else 'No'}"
        )
    click.echo("="*80 + "\n")


@drivers_group.command('set-pin')
@click.argument('driver_id')
@click.option('--pin', prompt=True, hide_input=True, confirmation_prompt=True, help='New PIN')
@with_appcontext
def set_pin_cli(driver_id, pin):
    """Set a driver's punch PIN."""
    driver = driver_service.get_driver_by_driver_id(driver_id)
    if not driver:
        click.echo(f"FAIL Driver {driver_id} not found")
        return
    try:
        driver_service.set_pin(driver.id, pin)
        click.echo(f"PASS PIN updated for {driver.driver_id}")
    except DriverError as e:
        click.echo(f"FAIL {str(e)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(drivers_group)
