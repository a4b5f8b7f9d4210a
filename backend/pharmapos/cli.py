# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/pharmapos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to pharmapos (PowerShell: $env:FLASK_APP="pharmapos").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: tables, missing columns, legacy fixes, roles, permissions, superadmin, settings.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role, outlet and status.
# - python -m flask users create --username kasir1 --password "kasir1234" --role Cashier --outlet-id 1
#   Create a user (prompts if options are omitted).
#
# Permission inspection/repair:
# - python -m flask perms list Cashier
#   Print a role's permission matrix.
# - python -m flask perms grant Cashier Transactions create
# - python -m flask perms revoke Cashier Transactions create
#   Allow or deny one (module, action) cell for a role.

import click
from flask.cli import with_appcontext

from .errors import APIError
from .extensions import db
from .models import Outlet, Role, User
from .permissions import ACTIONS, MODULES, SUPERADMIN_ROLE
from .services import permission_service
from .services.auth_service import hash_password
from .services.bootstrap_service import bootstrap_database


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the database.

    Safe to run repeatedly: each step only creates what is missing.
    The superadmin password comes from SUPERADMIN_PASSWORD.
    """
    click.echo("START Initializing PharmaPOS database...")
    summary = bootstrap_database()

    for column in summary["columns_added"]:
        click.echo(f"PASS Added column {column}")
    click.echo(f"PASS Legacy fixes applied: {summary['legacy_fixes']}")
    click.echo(f"PASS Roles created: {summary['roles_created']}")
    click.echo(f"PASS Permission cells created: {summary['permissions_created']}")
    if summary["superadmin_created"]:
        click.echo("PASS Superadmin account created (change the password!)")
    click.echo(f"PASS Settings created: {summary['settings_created']}")
    click.echo("DONE Initialization complete.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to seed.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role and outlet."""
    users = db.session.query(User).order_by(User.username.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Username':<20} {'Role':<15} {'Outlet':<25} {'Status'}")
    click.echo("="*80)

    for user in users:
        outlet = user.outlet.name if user.outlet else "-"
        click.echo(f"{user.id:<5} {user.username:<20} {user.role:<15} {outlet:<25} {user.status}")


@users_group.command('create')
@click.option('--username', prompt=True, help='Login name (case-sensitive)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', prompt=True, help='Role name, e.g. Admin or Cashier')
@click.option('--outlet-id', type=int, default=None, help='Outlet the user works at')
@with_appcontext
def create_user(username, password, role, outlet_id):
    """Create a user account."""
    if db.session.query(User).filter_by(username=username).first():
        raise click.ClickException(f"Username {username!r} already exists")

    if role != SUPERADMIN_ROLE and not db.session.query(Role).filter_by(name=role).first():
        raise click.ClickException(f"Unknown role {role!r}")

    if outlet_id is not None and not db.session.query(Outlet).filter_by(id=outlet_id).first():
        raise click.ClickException(f"Outlet {outlet_id} not found")

    try:
        password_hash = hash_password(password)
    except APIError as e:
        raise click.ClickException(e.message)

    user = User(username=username, password_hash=password_hash, role=role, outlet_id=outlet_id, status="active")
    db.session.add(user)
    db.session.commit()
    click.echo(f"PASS Created user {user.username} (ID: {user.id}, role: {user.role})")


@click.group('perms')
def perms_group():
    """Permission inspection and repair commands."""


def _role_or_fail(role_name: str) -> Role:
    role = db.session.query(Role).filter_by(name=role_name).first()
    if not role:
        raise click.ClickException(f"Role {role_name!r} not found")
    return role


@perms_group.command('list')
@click.argument('role_name')
@with_appcontext
def list_permissions(role_name):
    """Print the permission matrix of a role."""
    matrix = permission_service.get_permissions_for_role_name(role_name)

    click.echo(f"\n{'Module':<16} " + " ".join(f"{action:<7}" for action in ACTIONS))
    click.echo("-" * 50)
    for row in matrix:
        cells = " ".join(f"{('yes' if row[action] else '-'):<7}" for action in ACTIONS)
        click.echo(f"{row['module']:<16} {cells}")


def _set_cell(role_name: str, module: str, action: str, allowed: bool) -> None:
    role = _role_or_fail(role_name)
    try:
        permission_service.set_permission(role.id, module, action, allowed)
    except APIError as e:
        raise click.ClickException(e.message)


@perms_group.command('grant')
@click.argument('role_name')
@click.argument('module', type=click.Choice(MODULES))
@click.argument('action', type=click.Choice(ACTIONS))
@with_appcontext
def grant_permission(role_name, module, action):
    """Allow ACTION on MODULE for a role."""
    _set_cell(role_name, module, action, True)
    click.echo(f"PASS Granted {module}.{action} to {role_name}")


@perms_group.command('revoke')
@click.argument('role_name')
@click.argument('module', type=click.Choice(MODULES))
@click.argument('action', type=click.Choice(ACTIONS))
@with_appcontext
def revoke_permission(role_name, module, action):
    """Deny ACTION on MODULE for a role."""
    _set_cell(role_name, module, action, False)
    click.echo(f"PASS Revoked {module}.{action} from {role_name}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
