"""
Service Errors

Exception taxonomy shared by every service. Each error carries the HTTP
status the API layer answers with and a message that is safe to show to
the user.
"""


class MealPlannerError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code = 500
    default_message = 'Something went wrong'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'message': self.message, 'error': type(self).__name__}


class InvalidInput(MealPlannerError):
    """Malformed date, unknown slot, or an empty/unresolvable selection."""
    status_code = 400
    default_message = 'Invalid input'


class Unauthenticated(MealPlannerError):
    status_code = 401
    default_message = 'Not signed in'


class QuotaExceeded(MealPlannerError):
    """The user has no meal credits left; route them to billing, don't retry."""
    status_code = 402
    default_message = 'Insufficient meal credits'


class NotFound(MealPlannerError):
    status_code = 404
    default_message = 'Not found'


class Conflict(MealPlannerError):
    # Reserved: every write path is an upsert
    status_code = 409
    default_message = 'Conflict'


class UpstreamFailure(MealPlannerError):
    """A backend (merge, suggestion, storage, email) failed or sent garbage."""
    status_code = 502
    default_message = 'Upstream service failed'


class Timeout(UpstreamFailure):
    status_code = 504
    default_message = 'Upstream service timed out'
