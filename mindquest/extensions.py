from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

db = SQLAlchemy()
migrate = Migrate()
login = LoginManager()


@login.unauthorized_handler
def unauthorized_callback():
    """Every route is JSON, so unauthenticated calls get a 401 body instead of a redirect."""
    from flask import jsonify, request
    from mindquest.exceptions import NotAuthenticatedError
    from mindquest.logging_config import log_security_event

    log_security_event('NOT_AUTHENTICATED', ip_address=request.remote_addr, description=request.path)
    error = NotAuthenticatedError()
    return jsonify(error.to_result()), error.status_code


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["500 per day", "100 per hour"],
    storage_uri="memory://",
)
