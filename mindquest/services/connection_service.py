"""
Connection Service - Connection requests between users and "my circle".

A request goes pending -> accepted or pending -> rejected. Accepted
connections can be removed by either user. A rejected request can be sent
again later; the same row is reopened.
"""

import logging
from datetime import datetime
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from mindquest.extensions import db
from mindquest.exceptions import (
    ConnectionExistsError, ConnectionNotFoundError, InvalidConnectionError, UserNotFoundError
)
from mindquest.models import Connection, ConnectionStatus, User

logger = logging.getLogger(__name__)

# Statuses as seen by one of the two users
STATUS_ACCEPTED = 'accepted'
STATUS_PENDING_SENT = 'pending_sent'
STATUS_PENDING_RECEIVED = 'pending_received'


class ConnectionService:
    """Service for user connections."""

    @staticmethod
    def get_connection_between(user_id, other_user_id, lock=False):
        query = select(Connection).where(
            Connection.user_low_id == min(user_id, other_user_id),
            Connection.user_high_id == max(user_id, other_user_id)
        )
        if lock:
            query = query.with_for_update()
        return db.session.scalar(query)

    @staticmethod
    def send_request(user, target_user_id):
        """
        Send a connection request.

        If the other user already asked us, the request is accepted instead.

        Returns:
            dict: {'success', 'connection', 'status'} or a failure result
        """
        if target_user_id == user.id:
            return InvalidConnectionError().to_result()

        target = db.session.get(User, target_user_id)
        if target is None:
            return UserNotFoundError().to_result()

        existing = ConnectionService.get_connection_between(user.id, target.id, lock=True)
        if existing is not None:
            if existing.is_pending and existing.receiver_id == user.id:
                return ConnectionService._respond(existing, ConnectionStatus.ACCEPTED)
            if existing.status != ConnectionStatus.REJECTED:
                return ConnectionExistsError().to_result(status=existing.status)

            existing.set_pair(user.id, target.id)
            existing.status = ConnectionStatus.PENDING
            existing.created_at = datetime.utcnow()
            existing.responded_at = None
            db.session.flush()
            logger.info(f"User {user.id} re-sent a connection request to user {target.id}")
            return {'success': True, 'connection': existing.to_dict(), 'status': STATUS_PENDING_SENT}

        connection = Connection(requester_id=user.id, receiver_id=target.id, status=ConnectionStatus.PENDING)
        try:
            with db.session.begin_nested():
                db.session.add(connection)
        except IntegrityError:
            # The other user sent theirs at the same moment
            return ConnectionExistsError().to_result()

        logger.info(f"User {user.id} sent a connection request to user {target.id}")
        return {'success': True, 'connection': connection.to_dict(), 'status': STATUS_PENDING_SENT}

    @staticmethod
    def _get_received_request(user, connection_id):
        connection = db.session.scalar(
            select(Connection).where(Connection.id == connection_id).with_for_update()
        )
        if connection is None or connection.receiver_id != user.id or not connection.is_pending:
            return None
        return connection

    @staticmethod
    def _respond(connection, status):
        connection.status = status
        connection.responded_at = datetime.utcnow()
        db.session.flush()

        logger.info(
            f"User {connection.receiver_id} {status} the connection request from user {connection.requester_id}"
        )
        return {
            'success': True,
            'connection': connection.to_dict(),
            'status': STATUS_ACCEPTED if status == ConnectionStatus.ACCEPTED else status,
        }

    @staticmethod
    def accept_request(user, connection_id):
        """Accept a pending request sent to this user."""
        connection = ConnectionService._get_received_request(user, connection_id)
        if connection is None:
            return ConnectionNotFoundError().to_result()
        return ConnectionService._respond(connection, ConnectionStatus.ACCEPTED)

    @staticmethod
    def reject_request(user, connection_id):
        """Reject a pending request sent to this user."""
        connection = ConnectionService._get_received_request(user, connection_id)
        if connection is None:
            return ConnectionNotFoundError().to_result()
        return ConnectionService._respond(connection, ConnectionStatus.REJECTED)

    @staticmethod
    def remove_connection(user, other_user_id):
        """Remove an accepted connection, or withdraw a pending request, in either direction."""
        connection = ConnectionService.get_connection_between(user.id, other_user_id, lock=True)
        if connection is None or connection.status == ConnectionStatus.REJECTED:
            return ConnectionNotFoundError().to_result()

        db.session.delete(connection)
        db.session.flush()

        logger.info(f"User {user.id} removed the connection with user {other_user_id}")
        return {'success': True, 'user_id': other_user_id}

    @staticmethod
    def _connections_of(user):
        return db.session.scalars(
            select(Connection).where(
                or_(Connection.requester_id == user.id, Connection.receiver_id == user.id),
                Connection.status != ConnectionStatus.REJECTED
            )
        ).all()

    @staticmethod
    def get_statuses(user):
        """
        Status of every user this user has a live connection with.

        Returns:
            dict: {other_user_id: 'accepted' | 'pending_sent' | 'pending_received'}
        """
        statuses = {}
        for connection in ConnectionService._connections_of(user):
            other_id = connection.other_user_id(user.id)
            if connection.is_accepted:
                statuses[other_id] = STATUS_ACCEPTED
            elif connection.requester_id == user.id:
                statuses[other_id] = STATUS_PENDING_SENT
            else:
                statuses[other_id] = STATUS_PENDING_RECEIVED
        return statuses

    @staticmethod
    def get_pending_requests(user):
        """Pending requests received by this user, newest first."""
        return db.session.scalars(
            select(Connection)
            .where(Connection.receiver_id == user.id, Connection.status == ConnectionStatus.PENDING)
            .order_by(Connection.created_at.desc(), Connection.id.desc())
        ).all()

    @staticmethod
    def get_circle_ids(user):
        """Ids of the users with an accepted connection to this user."""
        return [
            connection.other_user_id(user.id)
            for connection in ConnectionService._connections_of(user)
            if connection.is_accepted
        ]
