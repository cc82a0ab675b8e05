# FILE: errors.py


class InterviewError(Exception):
    """Base for errors raised synchronously to the caller of a user operation."""

    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self) -> dict:
        return {"error": self.__class__.__name__, "message": self.message}


class NotAuthenticated(InterviewError):
    status_code = 401


class AccessDenied(InterviewError):
    status_code = 403


class NotFound(InterviewError):
    status_code = 404


class InvalidTransition(InterviewError):
    status_code = 409


class DuplicateResponse(InvalidTransition):
    pass


class InvalidInput(InterviewError):
    status_code = 400


class EmptyResultSet(Exception):
    """Raised when a job has nothing to work on; logged, never written."""


# AI failures are absorbed by the fallback path inside jobs.
class AIError(Exception):
    pass


class AIUnavailable(AIError):
    pass


class AIMalformedResponse(AIError):
    pass
