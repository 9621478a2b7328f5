from __future__ import annotations

from typing import Optional

from fastapi import status


# PUBLIC_INTERFACE
class ActivityError(Exception):
    """
    Base error for the activity service.

    Attributes:
        message: Static, client-safe message rendered as {"error": message}
        status_code: HTTP status code returned to the caller
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ActivityError):
    """A required field is missing or empty."""

    status_code = status.HTTP_400_BAD_REQUEST


class MalformedRequestError(ActivityError):
    """The request body could not be parsed."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Invalid request body") -> None:
        super().__init__(message)


class NotFoundError(ActivityError):
    """No activity matches the (id, userId) pair."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Activity not found") -> None:
        super().__init__(message)


class PersistenceError(ActivityError):
    """Writing the activity document failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
