import click
from flask import current_app
from flask.cli import with_appcontext

from scisubmit.errors import WorkflowError
from scisubmit.extensions import db
from scisubmit.models.enumerations import Role, UserStatus
from scisubmit.services.user_service import check_password_strength
from scisubmit.utils.model_utils import user_utils


def create_admin_if_not_exists(email, password, first_name="Conference", last_name="Admin"):
    """Create a verified, active admin unless the email is already taken."""
    existing = user_utils.get_user_by_email(email)
    if existing:
        click.echo(f"ℹ User '{existing.email}' already exists, skipping creation")
        return existing
    user = user_utils.create_user(
        password=password,
        email=user_utils.normalize_email(email),
        first_name=first_name,
        last_name=last_name,
        role=Role.ADMIN,
        status=UserStatus.ACTIVE,
        is_verified=True,
    )
    click.echo(f"✔ Created admin '{user.email}'")
    return user


@click.command("setup")
@click.option("--create-admin/--no-create-admin", default=True, help="Create the bootstrap admin from ADMIN_* settings")
@with_appcontext
def setup_command(create_admin):
    """Create all tables and, optionally, the bootstrap admin."""
    db.create_all()
    click.echo("✔ Database tables created")
    if not create_admin:
        return
    password = current_app.config.get("ADMIN_PASSWORD")
    if not password:
        click.echo("ℹ ADMIN_PASSWORD not set; admin bootstrap skipped")
        return
    create_admin_if_not_exists(
        current_app.config.get("ADMIN_EMAIL"),
        password,
        current_app.config.get("ADMIN_FIRST_NAME", "Conference"),
        current_app.config.get("ADMIN_LAST_NAME", "Admin"),
    )


@click.command("create-admin")
@click.option("--email", required=True, help="Admin email address")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Admin password")
@click.option("--first-name", default="Conference", show_default=True)
@click.option("--last-name", default="Admin", show_default=True)
@with_appcontext
def create_admin_command(email, password, first_name, last_name):
    """Create a verified, active admin account."""
    try:
        check_password_strength(password)
    except WorkflowError as exc:
        raise click.BadParameter(exc.message, param_hint="--password")
    create_admin_if_not_exists(email, password, first_name, last_name)
