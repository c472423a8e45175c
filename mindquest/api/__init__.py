"""
API Blueprint

JSON endpoints for the daily challenge, streaks, leagues, ranking, journal,
connections and nudges.
Every endpoint requires a signed-in user.
"""

from flask import Blueprint

bp = Blueprint('api', __name__, url_prefix='/api')

# Import routes after blueprint creation to avoid circular imports
from mindquest.api import challenge_routes, streak_routes, league_routes, journal_routes, social_routes
