import click
from flask.cli import with_appcontext

from scisubmit.services.conference_service import refresh_conference_statuses


@click.command("refresh-conference-status")
@click.option("--date", "on_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Evaluate as of this day instead of today")
@with_appcontext
def refresh_conference_status_command(on_date):
    """Recompute conference statuses from their dates. Meant for a daily cron."""
    changed = refresh_conference_statuses(on_date.date() if on_date else None)
    click.echo(f"Conference statuses refreshed: {changed} changed.")
