"""
Shared pytest fixtures: a fresh app with an in-memory database per test,
user factories and a signed-in API client.
"""

from datetime import date

import pytest
from flask import g
from flask.testing import FlaskClient

from config import TestingConfig
from mindquest import create_app
from mindquest.extensions import db
from mindquest.models import User

# A Monday: required missions are hero (20), calm (20) and scripts (25)
MONDAY = date(2025, 1, 6)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    ctx = app.app_context()
    ctx.push()
    db.create_all()

    yield app

    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make_user(username=None, is_premium=False, **kwargs):
        counter['n'] += 1
        user = User(
            username=username or f'user{counter["n"]}',
            is_premium=is_premium,
            **kwargs
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user('ana')


@pytest.fixture
def premium_user(make_user):
    return make_user('bea', is_premium=True)


class RequestScopedClient(FlaskClient):
    """
    Test client that resolves the signed-in user on every request.

    The app fixture keeps one app context pushed for the whole test and
    requests reuse it, so Flask-Login's cached `g._login_user` would
    otherwise survive from one request to the next.
    """

    def open(self, *args, **kwargs):
        g.pop('_login_user', None)
        return super().open(*args, **kwargs)


@pytest.fixture
def client(app):
    app.test_client_class = RequestScopedClient
    return app.test_client()


@pytest.fixture
def login(client):
    """Sign a user in on the test client the way Flask-Login stores the session."""
    def _login(user):
        with client.session_transaction() as sess:
            sess['_user_id'] = str(user.id)
            sess['_fresh'] = True
        return client

    return _login
