# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/laundry_api/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "laundry_api:create_app".
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system create-tables
#   Create all tables (use `flask db upgrade` where migrations are managed).
#
# Users:
# - python -m flask users list [--role ADMIN]
#   List users with role and suspension state.
# - python -m flask users create --email root@laundry.local --name Root --role SUPER_ADMIN
#   Create a user of any role (prompts for the password).
#
# Laundries:
# - python -m flask laundries list
# - python -m flask laundries create --name "Clean Co" --email shop@clean.co --phone 0600000000 --admin-email admin@clean.co
#   Create a laundry owned by an existing ADMIN user.

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .models import Laundry, LaundryStatus, User, UserRole
from .services.auth_service import create_user, parse_role


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('create-tables')
@with_appcontext
def create_tables():
    """Create all tables for the configured database."""
    db.create_all()
    click.echo("PASS Tables created")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@click.option('--role', default=None, help='Filter by role')
@with_appcontext
def list_users(role):
    query = db.session.query(User)
    if role:
        query = query.filter(User.role == parse_role(role))
    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found")
        return

    for user in users:
        state = "SUSPENDED" if user.is_suspended else "active"
        laundry = f" laundry={user.laundry_id}" if user.laundry_id else ""
        click.echo(f"{user.id:>5}  {user.email:<40} {user.role.value:<14} {state}{laundry}")


@users_group.command('create')
@click.option('--email', prompt=True)
@click.option('--name', prompt=True)
@click.option('--role', default='CUSTOMER', show_default=True,
              type=click.Choice([r.value for r in UserRole]))
@click.option('--phone', default=None)
@click.password_option()
@with_appcontext
def create_user_command(email, name, role, phone, password):
    """Create a user of any role, including SUPER_ADMIN."""
    try:
        user = create_user(email=email, password=password, name=name, role=UserRole(role), phone=phone)
    except ApiError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Created user {user.email} (ID: {user.id}, role: {user.role.value})")


@click.group('laundries')
def laundries_group():
    """Laundry (tenant) commands."""


@laundries_group.command('list')
@with_appcontext
def list_laundries():
    laundries = db.session.query(Laundry).order_by(Laundry.id).all()
    if not laundries:
        click.echo("No laundries found")
        return
    for laundry in laundries:
        click.echo(f"{laundry.id:>5}  {laundry.name:<30} {laundry.status.value:<10} admin={laundry.admin_id}")


@laundries_group.command('create')
@click.option('--name', required=True)
@click.option('--email', required=True)
@click.option('--phone', required=True)
@click.option('--admin-email', required=True, help='Email of an existing ADMIN user')
@click.option('--status', default='ACTIVE', show_default=True,
              type=click.Choice([s.value for s in LaundryStatus]))
@with_appcontext
def create_laundry(name, email, phone, admin_email, status):
    """Create a laundry and bind it to its admin."""
    admin = db.session.query(User).filter_by(email=admin_email.strip().lower()).first()
    if admin is None:
        raise click.ClickException(f"No user with email {admin_email}")
    if admin.role != UserRole.ADMIN:
        raise click.ClickException(f"{admin_email} is {admin.role.value}, not ADMIN")
    if admin.laundry is not None:
        raise click.ClickException(f"{admin_email} already administers laundry {admin.laundry_id}")

    laundry = Laundry(name=name, email=email, phone=phone, admin_id=admin.id, status=LaundryStatus(status))
    db.session.add(laundry)
    db.session.commit()
    click.echo(f"PASS Created laundry {laundry.name} (ID: {laundry.id}) for {admin.email}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(laundries_group)
