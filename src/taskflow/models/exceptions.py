"""Exceptions raised by TaskFlow services and adapters."""

from taskflow.utils import exit_codes


class TaskFlowError(Exception):
    """Base exception carrying a user-facing message and an exit code."""

    exit_code = exit_codes.ERROR_GENERAL

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class TaskNotFoundError(TaskFlowError):
    """Raised when a task does not exist in the store."""

    exit_code = exit_codes.ERROR_NOT_FOUND


class ValidationError(TaskFlowError):
    """Raised when input is rejected before reaching the store."""

    exit_code = exit_codes.ERROR_INVALID_ARGS


class AttachmentValidationError(ValidationError):
    """Raised when an attachment violates the size or type limits."""


class ConfigError(TaskFlowError):
    """Raised for unreadable config or invalid data-directory settings."""


class StoreUnavailableError(TaskFlowError):
    """Raised when the task store cannot be reached."""

    exit_code = exit_codes.ERROR_NETWORK
