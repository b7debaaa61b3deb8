# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/adega/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (use `flask db upgrade` for migrated deployments).
# - python -m flask system seed-admin [--email admin@adega.local] [--password ...]
#   Idempotently create the default admin operator.
#
# Operators:
# - python -m flask operators create --name "Ana" --email ana@adega.local --password "..." --role employee
# - python -m flask operators list
#
# Catalog:
# - python -m flask products add --name "Malbec 750ml" --category Wine --sell-price 59.90 --stock 12
# - python -m flask products low-stock
#   List products at or below their reorder threshold.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .models.auth import ROLE_ADMIN, VALID_ROLES
from .money import format_cents, parse_cents
from .services import catalog_service, operator_service
from .services.errors import ServiceError


DEFAULT_ADMIN_EMAIL = "admin@adega.local"
DEFAULT_ADMIN_PASSWORD = "admin12345"


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('seed-admin')
@click.option('--name', default='Administrador', help='Admin display name')
@click.option('--email', default=DEFAULT_ADMIN_EMAIL, help='Admin email')
@click.option('--password', default=DEFAULT_ADMIN_PASSWORD, help='Admin password')
@with_appcontext
def seed_admin(name, email, password):
    """
    Create the default admin operator if it does not exist.

    SECURITY: Change the default password immediately in production!
    """
    existing = db.session.query(User).filter_by(email=email.lower()).first()
    if existing:
        click.echo(f"WARN  Admin '{email}' already exists (ID: {existing.id}), skipping...")
        return

    user = operator_service.create_operator(name=name, email=email, password=password, role=ROLE_ADMIN)
    click.echo(f"PASS Created admin operator: {user.email} (ID: {user.id})")


@click.group('operators')
def operators_group():
    """Operator account commands."""


@operators_group.command('create')
@click.option('--name', prompt=True)
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(VALID_ROLES), default='employee', show_default=True)
@with_appcontext
def create_operator(name, email, password, role):
    """Create an operator account."""
    try:
        user = operator_service.create_operator(name=name, email=email, password=password, role=role)
    except ServiceError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created operator: {user.email} (ID: {user.id}, role: {user.role})")


@operators_group.command('list')
@with_appcontext
def list_operators():
    """List all operators."""
    users = operator_service.list_operators()
    if not users:
        click.echo("No operators found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<30} {'Role':<10} {'Active'}")
    click.echo("="*80)
    for user in users:
        click.echo(f"{user.id:<5} {user.name:<25} {user.email:<30} {user.role:<10} {'yes' if user.is_active else 'no'}")


@click.group('products')
def products_group():
    """Catalog commands."""


@products_group.command('add')
@click.option('--name', required=True)
@click.option('--category', required=True)
@click.option('--sell-price', required=True, help='Sell price, e.g. 59.90')
@click.option('--cost-price', default='0', help='Unit cost, e.g. 32.50')
@click.option('--stock', type=int, default=0, show_default=True)
@click.option('--min-stock', type=int, default=5, show_default=True)
@click.option('--sku', default=None)
@click.option('--operator-id', type=int, default=None, help='Operator recorded in the activity log')
@with_appcontext
def add_product(name, category, sell_price, cost_price, stock, min_stock, sku, operator_id):
    """Register a product in the catalog."""
    try:
        product = catalog_service.create_product(operator_id, {
            "name": name,
            "category": category,
            "sku": sku,
            "sell_price_cents": parse_cents(sell_price),
            "cost_price_cents": parse_cents(cost_price),
            "stock": stock,
            "min_stock": min_stock,
        })
    except (ServiceError, ValueError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created product #{product.id}: {product.name} @ {format_cents(product.sell_price_cents)}")


@products_group.command('low-stock')
@with_appcontext
def low_stock():
    """List products at or below their reorder threshold."""
    products = catalog_service.list_low_stock()
    if not products:
        click.echo("All products are above their reorder threshold.")
        return

    click.echo(f"{'ID':<5} {'Name':<35} {'Stock':>6} {'Min':>6}")
    for product in products:
        click.echo(f"{product.id:<5} {product.name:<35} {product.stock:>6} {product.min_stock:>6}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(operators_group)
    app.cli.add_command(products_group)
