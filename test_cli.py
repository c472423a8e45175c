"""
Tests for the flask CLI commands.
"""

from datetime import date

from mindquest.extensions import db
from mindquest.models import User
from mindquest.services import LeagueService, ProgressService, StreakService
from conftest import MONDAY


def test_show_schedule(app):
    result = app.test_cli_runner().invoke(args=['show-schedule'])

    assert result.exit_code == 0
    assert 'Monday:' in result.output
    assert 'review' in result.output
    assert '(premium)' in result.output


def test_create_user(app):
    runner = app.test_cli_runner()

    created = runner.invoke(args=['create-user', 'carla', '--premium', '--timezone', 'Europe/Madrid'])
    repeated = runner.invoke(args=['create-user', 'carla'])

    user = db.session.scalar(db.select(User).where(User.username == 'carla'))
    assert created.exit_code == 0
    assert user.is_premium is True
    assert user.timezone == 'Europe/Madrid'
    assert 'already exists' in repeated.output


def test_close_league_week(app, make_user):
    a, b = make_user(), make_user()
    LeagueService.add_weekly_xp(a, 10, today=MONDAY)
    LeagueService.add_weekly_xp(b, 30, today=MONDAY)
    db.session.commit()

    result = app.test_cli_runner().invoke(args=['close-league-week', '--week', '2025-01-08'])

    assert result.exit_code == 0
    assert 'Closed 1 leagues.' in result.output
    assert LeagueService.get_membership(b, MONDAY).final_position == 1


def test_close_league_week_bad_date(app):
    result = app.test_cli_runner().invoke(args=['close-league-week', '--week', '08/01/2025'])
    assert result.exit_code != 0


def test_settle_wagers(app, user):
    ProgressService.add_tokens(user, 3)
    StreakService.place_wager(user, 3, today=date(2020, 1, 6))
    db.session.commit()

    result = app.test_cli_runner().invoke(args=['settle-wagers'])

    assert result.exit_code == 0
    assert 'Settled 1 wagers.' in result.output
    assert ProgressService.get_or_create_progress(user).power_tokens == 0
