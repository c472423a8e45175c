# mindquest/api/league_routes.py
# Weekly league standings and the global ranking

from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from mindquest.api import bp
from mindquest.api.responses import result_response
from mindquest.exceptions import InvalidAmountError
from mindquest.extensions import db, limiter
from mindquest.services import LeagueService, RankingService


@bp.route('/league')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def league_standing():
    """The user's league for this week, ranked, with promotion and demotion zones."""
    standing = LeagueService.get_standing(current_user)
    db.session.commit()
    return jsonify(standing)


@bp.route('/ranking')
@login_required
@limiter.limit(lambda: current_app.config.get("RATELIMIT_API_READ", "300 per hour"))
def ranking():
    """Ranking: ?period=weekly|monthly|historical&metric=xp|streak|victories&scope=global|circle&level=..."""
    try:
        data = RankingService.get_ranking(
            period=request.args.get('period', 'weekly'),
            metric=request.args.get('metric', 'xp'),
            scope=request.args.get('scope', 'global'),
            user=current_user,
            level_filter=request.args.get('level'),
            limit=max(1, min(request.args.get('limit', 100, type=int), 100)),
        )
    except ValueError as e:
        return result_response(InvalidAmountError(str(e)).to_result())
    return jsonify(data)
