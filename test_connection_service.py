"""
Tests for connection requests: the pending/accepted/rejected lifecycle,
removal and the circle used by the ranking.
"""

from sqlalchemy import func, select

from mindquest.extensions import db
from mindquest.models import Connection
from mindquest.services import ConnectionService


def connection_count():
    return db.session.scalar(select(func.count(Connection.id)))


class TestSendRequest:

    def test_request_is_pending_on_both_sides(self, make_user):
        ana, bea = make_user(), make_user()

        result = ConnectionService.send_request(ana, bea.id)

        assert result['success'] is True
        assert result['status'] == 'pending_sent'
        assert ConnectionService.get_statuses(ana) == {bea.id: 'pending_sent'}
        assert ConnectionService.get_statuses(bea) == {ana.id: 'pending_received'}
        assert ConnectionService.get_circle_ids(ana) == []

    def test_cannot_connect_with_yourself(self, user):
        assert ConnectionService.send_request(user, user.id)['error'] == 'invalid_connection'

    def test_unknown_user(self, user):
        assert ConnectionService.send_request(user, 9999)['error'] == 'user_not_found'

    def test_repeated_request_rejected(self, make_user):
        ana, bea = make_user(), make_user()
        ConnectionService.send_request(ana, bea.id)

        result = ConnectionService.send_request(ana, bea.id)

        assert result['error'] == 'connection_exists'
        assert connection_count() == 1

    def test_request_back_accepts_the_pending_one(self, make_user):
        ana, bea = make_user(), make_user()
        ConnectionService.send_request(ana, bea.id)

        result = ConnectionService.send_request(bea, ana.id)

        assert result['status'] == 'accepted'
        assert connection_count() == 1
        assert ConnectionService.get_circle_ids(ana) == [bea.id]

    def test_request_to_existing_connection_rejected(self, make_user):
        ana, bea = make_user(), make_user()
        sent = ConnectionService.send_request(ana, bea.id)
        ConnectionService.accept_request(bea, sent['connection']['id'])

        assert ConnectionService.send_request(bea, ana.id)['error'] == 'connection_exists'


class TestRespond:

    def test_receiver_accepts(self, make_user):
        ana, bea = make_user(), make_user()
        sent = ConnectionService.send_request(ana, bea.id)

        result = ConnectionService.accept_request(bea, sent['connection']['id'])

        assert result['status'] == 'accepted'
        assert ConnectionService.get_circle_ids(ana) == [bea.id]
        assert ConnectionService.get_circle_ids(bea) == [ana.id]
        assert ConnectionService.get_pending_requests(bea) == []

    def test_requester_cannot_accept_own_request(self, make_user):
        ana, bea = make_user(), make_user()
        sent = ConnectionService.send_request(ana, bea.id)

        assert ConnectionService.accept_request(ana, sent['connection']['id'])['error'] == 'connection_not_found'
        assert ConnectionService.get_statuses(ana) == {bea.id: 'pending_sent'}

    def test_rejected_request_is_hidden_and_can_be_sent_again(self, make_user):
        ana, bea = make_user(), make_user()
        sent = ConnectionService.send_request(ana, bea.id)

        rejected = ConnectionService.reject_request(bea, sent['connection']['id'])
        assert rejected['status'] == 'rejected'
        assert ConnectionService.get_statuses(ana) == {}
        assert ConnectionService.accept_request(bea, sent['connection']['id'])['error'] == 'connection_not_found'

        again = ConnectionService.send_request(ana, bea.id)

        assert again['status'] == 'pending_sent'
        assert again['connection']['id'] == sent['connection']['id']
        assert ConnectionService.get_statuses(bea) == {ana.id: 'pending_received'}

    def test_pending_requests_newest_first(self, make_user):
        ana, bea, carla = make_user(), make_user(), make_user()
        ConnectionService.send_request(bea, ana.id)
        ConnectionService.send_request(carla, ana.id)

        pending = ConnectionService.get_pending_requests(ana)

        assert [c.requester_id for c in pending] == [carla.id, bea.id]


class TestRemove:

    def test_either_user_can_remove(self, make_user):
        ana, bea = make_user(), make_user()
        sent = ConnectionService.send_request(ana, bea.id)
        ConnectionService.accept_request(bea, sent['connection']['id'])

        result = ConnectionService.remove_connection(bea, ana.id)

        assert result['success'] is True
        assert ConnectionService.get_circle_ids(ana) == []
        assert connection_count() == 0
        assert ConnectionService.remove_connection(ana, bea.id)['error'] == 'connection_not_found'

    def test_withdraw_pending_request(self, make_user):
        ana, bea = make_user(), make_user()
        ConnectionService.send_request(ana, bea.id)

        ConnectionService.remove_connection(ana, bea.id)

        assert ConnectionService.get_pending_requests(bea) == []
