# mindquest/exceptions.py
"""Custom exceptions for the MindQuest service."""


class MindQuestException(Exception):
    """Base exception for all application-specific exceptions."""
    code = 'mindquest_error'
    status_code = 400
    message = 'The request could not be completed.'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_result(self, **extra):
        """Failure payload in the same shape services return on success."""
        result = {'success': False, 'error': self.code, 'message': self.message}
        result.update(extra)
        return result


# --- Identity Exceptions ---

class NotAuthenticatedError(MindQuestException):
    """Raised when an operation runs without a resolved user."""
    code = 'not_authenticated'
    status_code = 401
    message = 'Please sign in to continue.'


class PremiumRequiredError(MindQuestException):
    """Raised when a free user reaches for a premium-only mission or perk."""
    code = 'premium_required'
    status_code = 403
    message = 'This feature is only available with a premium subscription.'


# --- Challenge Exceptions ---

class AlreadyCompletedError(MindQuestException):
    """Raised when a (user, mission, day) completion already exists."""
    code = 'already_completed'
    status_code = 200
    message = 'Mission already completed today.'


class UnknownMissionError(MindQuestException):
    """Raised when a mission id is not in the catalog."""
    code = 'unknown_mission'
    status_code = 404
    message = 'Mission not found.'


# --- Balance Exceptions ---

class InsufficientTokensError(MindQuestException):
    """Raised when a perk costs more power tokens than the user holds."""
    code = 'insufficient_tokens'
    message = 'Not enough power tokens.'


class InsufficientSeedsError(MindQuestException):
    """Raised when a wager exceeds the seeds available to stake."""
    code = 'insufficient_seeds'
    message = 'Not enough seeds for this wager.'


class InvalidAmountError(MindQuestException):
    """Raised when amount is negative, zero, or invalid."""
    code = 'invalid_amount'
    message = 'Amount must be a positive whole number.'


# --- Streak Exceptions ---

class ShieldUnavailableError(MindQuestException):
    """Raised when the weekly streak shield was already used."""
    code = 'shield_unavailable'
    message = 'The streak shield was already used this week.'


class WagerAlreadyActiveError(MindQuestException):
    """Raised when a wager is placed while another one is still open."""
    code = 'wager_active'
    message = 'A wager is already active.'


# --- Storage Exceptions ---

class StorageFailureError(MindQuestException):
    """Raised when a persistence write fails and the unit was rolled back."""
    code = 'storage_failure'
    status_code = 503
    message = 'Your progress could not be saved. Please try again.'


# --- Connection Exceptions ---

class UserNotFoundError(MindQuestException):
    """Raised when the other user of a connection does not exist."""
    code = 'user_not_found'
    status_code = 404
    message = 'User not found.'


class ConnectionNotFoundError(MindQuestException):
    """Raised when there is no matching connection or pending request."""
    code = 'connection_not_found'
    status_code = 404
    message = 'Connection not found.'


class ConnectionExistsError(MindQuestException):
    """Raised when a request is sent to someone already connected or asked."""
    code = 'connection_exists'
    status_code = 409
    message = 'You are already connected or a request is pending.'


class InvalidConnectionError(MindQuestException):
    """Raised when a user tries to connect with themselves."""
    code = 'invalid_connection'
    message = 'You cannot connect with yourself.'


# --- Nudge Exceptions ---

class NudgeNotFoundError(MindQuestException):
    code = 'nudge_not_found'
    status_code = 404
    message = 'Nudge not found.'
