"""
Domain errors raised by services and mapped to HTTP responses in app.main
"""


class PrepError(Exception):
    """Base class for all domain errors"""

    status_code = 500
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PrepError):
    """An attempt, subject, topic, question, user or certificate does not resolve"""

    status_code = 404
    code = "not_found"


class InvalidStateError(PrepError):
    """Operation attempted on a record in a terminal state"""

    status_code = 409
    code = "invalid_state"


class InvalidInputError(PrepError):
    status_code = 400
    code = "invalid_input"


class UnavailableError(PrepError):
    """Persistence or lock backend cannot be reached"""

    status_code = 503
    code = "unavailable"
