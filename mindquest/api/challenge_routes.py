# mindquest/api/challenge_routes.py
# Daily challenge: today's missions, completions, victories, progress and tokens

from flask import current_app, jsonify
from flask_login import current_user, login_required
from mindquest.api import bp
from mindquest.api.responses import result_response, get_json_body
from mindquest.extensions import db, limiter
from mindquest.services import MissionService, ProgressService, AchievementService


@bp.route('/challenge/today')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def todays_missions():
    """Today's required and bonus missions with completion state."""
    data = MissionService.get_todays_missions(current_user)
    db.session.commit()
    return jsonify(data)


@bp.route('/challenge/missions/<mission_id>/complete', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_MISSION_COMPLETE", "60 per hour"))
def complete_mission(mission_id):
    """Complete a mission for today. A repeat returns already_completed with 200."""
    body = get_json_body()
    metadata = body.get('metadata') if isinstance(body.get('metadata'), dict) else None

    result = MissionService.complete_mission(current_user, mission_id, metadata=metadata)
    db.session.commit()
    return result_response(result)


@bp.route('/challenge/victory', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_VICTORY", "20 per hour"))
def save_victory():
    body = get_json_body()
    result = MissionService.save_victory(
        current_user,
        body.get('text'),
        is_public=bool(body.get('is_public', False))
    )
    db.session.commit()
    return result_response(result, success_status=201)


@bp.route('/challenge/stats')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def mission_stats():
    return jsonify(MissionService.get_mission_stats(current_user))


@bp.route('/progress')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def progress():
    """XP, level, tokens and streak for the current user."""
    summary = ProgressService.get_summary(current_user)
    db.session.commit()
    return jsonify(summary)


@bp.route('/achievements')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def achievements():
    return jsonify({'achievements': AchievementService.get_all_achievements_with_progress(current_user)})


@bp.route('/tokens/spend', methods=['POST'])
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_TOKEN_SPEND", "30 per hour"))
def spend_tokens():
    """Spend power tokens on a perk."""
    result = ProgressService.spend_tokens(current_user, get_json_body().get('perk'))
    db.session.commit()
    return result_response(result)
