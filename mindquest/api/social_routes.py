# mindquest/api/social_routes.py
# Connections ("my circle") and adaptive nudges

from flask import current_app, jsonify
from flask_login import current_user, login_required
from mindquest.api import bp
from mindquest.api.responses import result_response
from mindquest.extensions import db, limiter
from mindquest.services import ConnectionService, NudgeService


@bp.route('/connections')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def connections():
    """Connection status per user id, plus the pending requests received."""
    pending = ConnectionService.get_pending_requests(current_user)
    return jsonify({
        'statuses': {str(user_id): status for user_id, status in ConnectionService.get_statuses(current_user).items()},
        'pending_requests': [c.to_dict() for c in pending],
        'pending_count': len(pending),
    })


@bp.route('/connections/<int:user_id>', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_CONNECTION_REQUEST", "15 per hour"))
def send_connection_request(user_id):
    result = ConnectionService.send_request(current_user, user_id)
    db.session.commit()
    return result_response(result, success_status=201)


@bp.route('/connections/<int:user_id>', methods=['DELETE'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_SOCIAL_ACTION", "60 per hour"))
def remove_connection(user_id):
    result = ConnectionService.remove_connection(current_user, user_id)
    db.session.commit()
    return result_response(result)


@bp.route('/connections/requests/<int:connection_id>/accept', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_SOCIAL_ACTION", "60 per hour"))
def accept_connection_request(connection_id):
    result = ConnectionService.accept_request(current_user, connection_id)
    db.session.commit()
    return result_response(result)


@bp.route('/connections/requests/<int:connection_id>/reject', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_SOCIAL_ACTION", "60 per hour"))
def reject_connection_request(connection_id):
    result = ConnectionService.reject_request(current_user, connection_id)
    db.session.commit()
    return result_response(result)


@bp.route('/nudge')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def nudge():
    """Today's nudge, if one is due. At most one per day; later calls return null."""
    result = NudgeService.check_nudge(current_user)
    db.session.commit()
    return jsonify(result)


@bp.route('/nudge/<int:nudge_id>/action', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_SOCIAL_ACTION", "60 per hour"))
def nudge_action(nudge_id):
    result = NudgeService.mark_action_taken(current_user, nudge_id)
    db.session.commit()
    return result_response(result)
