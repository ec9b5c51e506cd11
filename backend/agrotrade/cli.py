# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/agrotrade/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (use `flask db upgrade` for migrated deployments).
# - python -m flask system seed
#   Idempotently create a director and one manager per branch.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list [--branch branch1] [--role agent]
#   List users with role and branch.
# - python -m flask users create --name "Jane Doe" --email jane@example.com --password secret1 --role manager --branch branch1 --contact 0700000000
#   Create a user (prompts if options are omitted).
#
# Inventory inspection:
# - python -m flask inventory low-stock [--branch branch1]
#   Print out-of-stock and low-stock lots.

import click
from flask import current_app
from flask.cli import with_appcontext

from .constants import BRANCHES, ROLES, ROLE_DIRECTOR, ROLE_MANAGER
from .errors import ServiceError
from .extensions import db
from .models import Produce, User
from .services import auth_service
from .services.inventory_service import stock_bucket
from .units import kg_to_tonnes
from .validation import validate_registration


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('seed')
@with_appcontext
def seed():
    """
    Create the default staff accounts if missing.

    Creates:
    - director@agrotrade.local (director, branch1)
    - manager1@agrotrade.local (manager, branch1)
    - manager2@agrotrade.local (manager, branch2)
    Passwords default to SEED_PASSWORD. Change them in production!
    """
    password = current_app.config["SEED_PASSWORD"]
    defaults = [
        ("Director", "director@agrotrade.local", ROLE_DIRECTOR, BRANCHES[0]),
    ] + [
        (f"Manager {branch}", f"manager{i}@agrotrade.local", ROLE_MANAGER, branch)
        for i, branch in enumerate(BRANCHES, start=1)
    ]

    for name, email, role, branch in defaults:
        if auth_service.find_by_email(email):
            click.echo(f"WARN  User '{email}' already exists, skipping...")
            continue
        auth_service.create_user(
            name=name,
            email=email,
            password=password,
            role=role,
            branch=branch,
            contact="0700000000",
        )
        click.echo(f"PASS Created user: {email} with role '{role}' in {branch}")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' to add default users.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Full name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES), prompt=True, help='Role')
@click.option('--branch', type=click.Choice(BRANCHES), prompt=True, help='Branch')
@click.option('--contact', prompt=True, help='Phone number (10-15 digits)')
@with_appcontext
def create_user_cli(name, email, password, role, branch, contact):
    """Create a new user, applying the same rules as registration."""
    try:
        fields = validate_registration({
            "name": name, "email": email, "password": password, "confirmPassword": password,
            "role": role, "branch": branch, "contact": contact,
        })
        user = auth_service.create_user(**fields)
    except ServiceError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Created user {user.email} (ID: {user.id}) with role '{role}' in {branch}")


@users_group.command('list')
@click.option('--branch', type=click.Choice(BRANCHES), help='Filter by branch')
@click.option('--role', type=click.Choice(ROLES), help='Filter by role')
@with_appcontext
def list_users(branch, role):
    """List users with their role and branch."""
    query = db.session.query(User)
    if branch:
        query = query.filter_by(branch=branch)
    if role:
        query = query.filter_by(role=role)

    users = query.order_by(User.id).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<32} {'Role':<13} {'Branch'}")
    click.echo("="*90)
    for user in users:
        click.echo(f"{user.id:<5} {user.name:<25} {user.email:<32} {user.role:<13} {user.branch}")


@click.group('inventory')
def inventory_group():
    """Inventory inspection commands."""


@inventory_group.command('low-stock')
@click.option('--branch', type=click.Choice(BRANCHES), help='Filter by branch')
@with_appcontext
def low_stock(branch):
    """Print out-of-stock and low-stock lots."""
    query = db.session.query(Produce)
    if branch:
        query = query.filter_by(branch=branch)

    flagged = [p for p in query.order_by(Produce.branch, Produce.name).all() if stock_bucket(p.stock_kg) != "adequateStock"]
    if not flagged:
        click.echo("All lots adequately stocked.")
        return

    for produce in flagged:
        label = "OUT " if stock_bucket(produce.stock_kg) == "outOfStock" else "LOW "
        click.echo(f"{label} {produce.branch:<8} #{produce.id:<5} {produce.name:<25} {kg_to_tonnes(produce.stock_kg):g} t")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(inventory_group)
