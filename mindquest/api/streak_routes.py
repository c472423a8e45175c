# mindquest/api/streak_routes.py
# Streak check-in and the streak perks (shield, rescue, wager)

from flask import current_app, jsonify
from flask_login import current_user, login_required
from mindquest.api import bp
from mindquest.api.responses import result_response, get_json_body
from mindquest.extensions import db, limiter
from mindquest.services import StreakService, ProgressService


@bp.route('/streak')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def streak():
    state = ProgressService.get_or_create_streak(current_user)
    data = state.to_dict()
    data.update(StreakService.get_streak_features(current_user))
    db.session.commit()
    return jsonify(data)


@bp.route('/streak/check-in', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_CHECK_IN", "30 per hour"))
def check_in():
    """Record today's check-in. Send {"use_rescue": true} to bridge a gap with a rescue."""
    result = StreakService.record_check_in(
        current_user,
        use_rescue=bool(get_json_body().get('use_rescue', False))
    )
    db.session.commit()
    return result_response(result)


@bp.route('/streak/shield', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_STREAK_ACTION", "20 per hour"))
def activate_shield():
    result = StreakService.activate_shield(current_user)
    db.session.commit()
    return result_response(result)


@bp.route('/streak/wager', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_WAGER", "20 per hour"))
def place_wager():
    """Stake seeds on keeping today's streak: {"amount": 3}."""
    result = StreakService.place_wager(current_user, get_json_body().get('amount'))
    db.session.commit()
    return result_response(result)
