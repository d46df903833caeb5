"""Service-level error taxonomy.

Each error carries the HTTP status the API layer answers with. Messages are
short and safe to show to callers.
"""


class InsydError(Exception):
    """Base exception for every error a service operation reports to its caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(InsydError):
    """Missing or malformed input, or a self-referential operation."""

    status_code = 400


class NotFound(InsydError):
    """Unknown user, content, edge or notification.

    Also used when a notification exists but belongs to someone else, so the
    two cases cannot be told apart.
    """

    status_code = 404


class Unauthorized(InsydError):
    """Requester is not the owner of the content they tried to delete."""

    status_code = 403


class AlreadyExists(InsydError):
    """Duplicate like, application or follow."""

    status_code = 400


class InternalError(InsydError):
    """Store failure surfaced to the caller with a generic message."""

    status_code = 500

    def __init__(self, message: str, details: str = ""):
        super().__init__(message)
        self.details = details
