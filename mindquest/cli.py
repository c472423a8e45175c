# mindquest/cli.py
"""
Flask CLI commands for the weekly league cycle, wager settlement and
local development.
"""

import click
from datetime import datetime
from mindquest.extensions import db
from mindquest.catalog import WEEKLY_SCHEDULE
from mindquest.models import User
from mindquest.services import LeagueService, StreakService
from mindquest.time_helpers import get_user_today, get_previous_week_start, get_week_start

DAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')


def register_cli_commands(app):
    """Register CLI commands with the Flask app."""

    @app.cli.command('close-league-week')
    @click.option('--week', 'week', default=None,
                  help='Any date in the week to close (YYYY-MM-DD). Defaults to last week.')
    def close_league_week_command(week):
        """Persist final league positions for a week and close its leagues."""
        if week:
            try:
                week_start = get_week_start(datetime.strptime(week, '%Y-%m-%d').date())
            except ValueError:
                raise click.BadParameter('Use the YYYY-MM-DD format.', param_hint='--week')
        else:
            week_start = get_previous_week_start(get_user_today())

        click.echo(f'Closing leagues for week starting {week_start}...')
        closed = LeagueService.close_week(week_start)
        db.session.commit()
        click.echo(f'Closed {closed} leagues.')

    @app.cli.command('settle-wagers')
    def settle_wagers_command():
        """Resolve as lost every wager placed before its owner's current day."""
        click.echo('Settling stale wagers...')
        settled = StreakService.settle_stale_wagers()
        db.session.commit()
        click.echo(f'Settled {settled} wagers.')

    @app.cli.command('show-schedule')
    def show_schedule_command():
        """Print the weekly mission schedule."""
        for weekday, day in sorted(WEEKLY_SCHEDULE.items()):
            click.echo(f'{DAY_NAMES[weekday]}:')
            for mission in day.required_missions:
                click.echo(f'  {mission.id:<12} {mission.base_xp:>4} XP')
            for mission in day.bonus_missions:
                click.echo(f'  {mission.id:<12} {mission.base_xp:>4} XP  (premium)')

    @app.cli.command('create-user')
    @click.argument('username')
    @click.option('--premium', is_flag=True, help='Give the user a premium subscription.')
    @click.option('--timezone', 'timezone', default=None, help='IANA timezone, e.g. Europe/Madrid.')
    def create_user_command(username, premium, timezone):
        """Create a local user (sign-in normally comes from the identity provider)."""
        existing = db.session.scalar(db.select(User).where(User.username == username))
        if existing:
            click.echo(f"User '{username}' already exists (id {existing.id}).")
            return

        user = User(username=username, is_premium=premium, timezone=timezone)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created user '{username}' (id {user.id}{', premium' if premium else ''}).")
