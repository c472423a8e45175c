# mindquest/api/journal_routes.py
# Mood check-ins and reflections

from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from mindquest.api import bp
from mindquest.api.responses import result_response, get_json_body
from mindquest.extensions import db, limiter
from mindquest.services import JournalService


@bp.route('/journal')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def journal_entries():
    entry_type = request.args.get('type')
    if entry_type not in (None, 'check_in', 'reflection'):
        entry_type = None
    return jsonify({'entries': JournalService.get_entries(current_user, entry_type=entry_type)})


@bp.route('/journal/check-in', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_CHECK_IN", "30 per hour"))
def mood_check_in():
    """Mood check-in: {"mood": 7, "energy": 5, "stress": 4, "note": "..."}. Also counts for the streak."""
    body = get_json_body()
    result = JournalService.create_check_in(
        current_user,
        body.get('mood'),
        body.get('energy'),
        body.get('stress'),
        note=body.get('note'),
        use_rescue=bool(body.get('use_rescue', False)),
    )
    db.session.commit()
    return result_response(result, success_status=201)


@bp.route('/journal/reflections', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_CHECK_IN", "30 per hour"))
def create_reflection():
    body = get_json_body()
    tags = body.get('tags') if isinstance(body.get('tags'), list) else None
    result = JournalService.create_reflection(
        current_user, body.get('text'), title=body.get('title'), tags=tags
    )
    db.session.commit()
    return result_response(result, success_status=201)
