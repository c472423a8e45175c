"""
Tests for error handling.
Verifies error handler registration, JSON error bodies, mapping of service
exceptions to HTTP statuses and the production catch-all.
"""

from sqlalchemy.exc import OperationalError

from config import TestingConfig
from mindquest import create_app
from mindquest.exceptions import (
    AlreadyCompletedError, InsufficientSeedsError, MindQuestException,
    NotAuthenticatedError, StorageFailureError
)


def test_error_handlers_registered(app):
    """All HTTP and application error handlers are registered."""
    for code in (400, 401, 403, 404, 405, 429, 500, 503):
        assert code in app.error_handler_spec[None], f'No handler for {code}'

    handlers = app.error_handler_spec[None][None]
    assert MindQuestException in handlers
    assert Exception in handlers  # catch-all outside debug mode


def test_no_catch_all_in_debug_mode():
    class DebugTestingConfig(TestingConfig):
        DEBUG = True

    app = create_app(DebugTestingConfig)
    assert Exception not in app.error_handler_spec[None].get(None, {})


def test_404_returns_json(client):
    response = client.get('/api/does-not-exist')

    assert response.status_code == 404
    assert response.is_json
    assert response.get_json()['error'] == 'not_found'


def test_405_returns_json(client):
    response = client.get('/api/streak/check-in')

    assert response.status_code == 405
    assert response.get_json()['error'] == 'method_not_allowed'


def test_storage_failure_maps_to_503(app, client):
    def fail():
        raise StorageFailureError()

    app.add_url_rule('/api/_fail', 'fail', fail)
    response = client.get('/api/_fail')

    assert response.status_code == 503
    assert response.get_json() == {
        'success': False,
        'error': 'storage_failure',
        'message': 'Your progress could not be saved. Please try again.',
    }


def test_database_error_is_rolled_back_and_hidden(app, client):
    def broken_query():
        raise OperationalError('SELECT 1', {}, Exception('connection lost'))

    app.add_url_rule('/api/_db', 'db_error', broken_query)
    response = client.get('/api/_db')

    assert response.status_code == 503
    body = response.get_json()
    assert body['error'] == 'storage_failure'
    assert 'connection lost' not in body['message']


def test_unexpected_exception_is_generic_500(app, client):
    def crash():
        raise RuntimeError('secret internals')

    app.add_url_rule('/api/_crash', 'crash', crash)
    response = client.get('/api/_crash')

    assert response.status_code == 500
    assert response.get_json()['error'] == 'internal_error'
    assert 'secret internals' not in response.get_data(as_text=True)


def test_exception_results_share_one_shape():
    assert AlreadyCompletedError().to_result(mission_id='hero') == {
        'success': False,
        'error': 'already_completed',
        'message': 'Mission already completed today.',
        'mission_id': 'hero',
    }
    assert AlreadyCompletedError.status_code == 200
    assert NotAuthenticatedError.status_code == 401
    assert InsufficientSeedsError('Custom').to_result()['message'] == 'Custom'
