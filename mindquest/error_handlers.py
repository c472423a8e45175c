"""
Error Handlers Module

Centralized JSON error handling for the API:
- HTTP errors (400/401/403/404/405/429/500/503)
- MindQuestException subclasses, mapped to their HTTP status
- Database errors and a production catch-all
- Security logging for auth and rate-limit failures
"""

from flask import request, jsonify, current_app
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError
from mindquest.exceptions import MindQuestException
from mindquest.logging_config import log_security_event


def log_error_event(error_code, error_message, exception=None):
    """
    Log 401/403/429 responses to the security log.

    Args:
        error_code: HTTP status code
        error_message: Error message
        exception: Original exception object (if any)
    """
    event_type_map = {
        401: 'UNAUTHORIZED_ACCESS',
        403: 'PERMISSION_DENIED',
        429: 'RATE_LIMIT_EXCEEDED',
    }
    event_type = event_type_map.get(error_code)
    if event_type is None:
        return

    description = f"HTTP {error_code}: {error_message} {request.method} {request.path}"
    if exception is not None and current_app.debug:
        description += f" ({type(exception).__name__}: {exception})"

    log_security_event(
        event_type,
        user_id=current_user.id if current_user.is_authenticated else None,
        ip_address=request.remote_addr,
        description=description,
    )


def create_error_response(status_code, error, message, description=None):
    """
    JSON error body in the same shape as a failed service result.

    Args:
        status_code: HTTP status code
        error: Stable machine-readable code
        message: Short error message
        description: Optional detailed description

    Returns:
        Flask response tuple
    """
    response = {
        'success': False,
        'error': error,
        'message': message,
    }
    if description:
        response['description'] = description

    return jsonify(response), status_code


# ==================== HTTP Error Handlers ====================

def handle_400(e):
    """Handle 400 Bad Request errors."""
    return create_error_response(
        400,
        'bad_request',
        'The request could not be understood by the server.',
        getattr(e, 'description', None)
    )


def handle_401(e):
    """Handle 401 Unauthorized errors."""
    log_error_event(401, 'Unauthorized', e)
    return create_error_response(401, 'not_authenticated', 'Please sign in to continue.')


def handle_403(e):
    """Handle 403 Forbidden errors."""
    log_error_event(403, 'Forbidden', e)
    return create_error_response(403, 'forbidden', "You don't have permission to access this resource.")


def handle_404(e):
    """Handle 404 Not Found errors."""
    return create_error_response(404, 'not_found', 'The requested resource does not exist.')


def handle_405(e):
    return create_error_response(405, 'method_not_allowed', 'Method not allowed for this endpoint.')


def handle_429(e):
    """Handle 429 Too Many Requests errors (rate limiting)."""
    log_error_event(429, 'Rate Limit Exceeded', e)

    description = 'Please wait a moment before trying again.'
    if hasattr(e, 'description') and e.description:
        description = e.description

    return create_error_response(
        429,
        'rate_limited',
        "You've made too many requests in a short period of time.",
        description
    )


def handle_500(e):
    """Handle 500 Internal Server Error."""
    current_app.logger.error(f"Internal Server Error: {str(e)}", exc_info=True)

    # In production, don't expose internal error details
    if current_app.debug:
        message = str(e)
    else:
        message = 'An unexpected error occurred on our end.'

    return create_error_response(500, 'internal_error', message)


def handle_503(e):
    """Handle 503 Service Unavailable errors."""
    return create_error_response(
        503,
        'service_unavailable',
        'The service is temporarily unavailable.',
        'Please try again in a few moments.'
    )


# ==================== Application Error Handlers ====================

def handle_mindquest_exception(e):
    """
    Handle exceptions raised by services.

    Business failures are normally returned as result dicts; this covers
    the ones raised instead, StorageFailureError in particular.
    """
    if e.status_code >= 500:
        current_app.logger.error(f"{type(e).__name__}: {e.message}", exc_info=True)
    else:
        current_app.logger.info(f"{type(e).__name__}: {e.message}")
    return jsonify(e.to_result()), e.status_code


def handle_database_error(e):
    """
    Handle SQLAlchemy database errors.

    The session is rolled back so the request leaves no partial writes.
    """
    from mindquest.extensions import db

    db.session.rollback()
    current_app.logger.error(f"Database error: {str(e)}", exc_info=True)

    # In production, don't expose database details
    if current_app.debug:
        message = f"Database error: {str(e)}"
    else:
        message = 'A database error occurred. Please try again.'

    return create_error_response(503, 'storage_failure', message)


# ==================== Generic Exception Handler ====================

def handle_generic_exception(e):
    """
    Handle any uncaught exceptions.

    Only registered outside debug mode so the debugger still sees them.
    """
    current_app.logger.error(
        f"Unhandled exception: {type(e).__name__}: {str(e)}",
        exc_info=True
    )
    return create_error_response(
        500,
        'internal_error',
        'An unexpected error occurred.',
        'Our team has been notified and is working to fix the issue.'
    )


# ==================== Registration Function ====================

def register_error_handlers(app):
    """
    Register all error handlers with the Flask application.

    Args:
        app: Flask application instance
    """
    app.register_error_handler(400, handle_400)
    app.register_error_handler(401, handle_401)
    app.register_error_handler(403, handle_403)
    app.register_error_handler(404, handle_404)
    app.register_error_handler(405, handle_405)
    app.register_error_handler(429, handle_429)
    app.register_error_handler(500, handle_500)
    app.register_error_handler(503, handle_503)

    app.register_error_handler(MindQuestException, handle_mindquest_exception)
    app.register_error_handler(SQLAlchemyError, handle_database_error)

    # Catch-all goes last, and only outside debug mode
    if not app.debug:
        app.register_error_handler(Exception, handle_generic_exception)

    app.logger.info("Error handlers registered successfully")
