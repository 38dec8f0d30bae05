from fastapi import status


class KinshipError(Exception):
    """Base exception for rejected requests.

    Every subclass maps to one HTTP status. The message is shown to the
    caller as-is.

    Attributes:
        kind: Short machine-readable name of the error class
        status_code: HTTP status used when rendering the error
        message: Human-readable reason
    """

    kind: str = "internal_error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(KinshipError):
    """Exception raised for malformed input or self-targeting actions."""

    kind = "bad_request"
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(KinshipError):
    """Exception raised when a credential is missing or invalid."""

    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(KinshipError):
    """Exception raised when a block or ownership rule forbids an action."""

    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(KinshipError):
    """Exception raised when a record or relationship does not exist."""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(KinshipError):
    """Exception raised for duplicate actions and uniqueness violations."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class InternalError(KinshipError):
    """Exception raised when a collaborator fails unexpectedly."""

    pass
