from typing import Optional


class TaskboardError(Exception):
    """Base class for failures surfaced by the task API client."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidRequestError(TaskboardError):
    """The server rejected the request: bad title, unknown owner, duplicate email."""


class NotFoundError(TaskboardError):
    """The referenced task or user no longer exists."""


class TransportError(TaskboardError):
    """Network failure, timeout, server error or an unexpected payload."""
