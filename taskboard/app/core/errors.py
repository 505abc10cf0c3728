from typing import Dict, List, Optional

FieldErrors = Dict[str, List[str]]


class TaskboardError(Exception):
    """Base for every error the service surfaces to callers."""

    status_code = 500
    default_message = "Operation failed"

    def __init__(self, message: Optional[str] = None, *, cause: Optional[BaseException] = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.cause = cause

    def to_payload(self) -> dict:
        return {"detail": self.message}


class FieldValidationError(TaskboardError):
    """Raised when raw task input fails field validation."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: FieldErrors, message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def to_payload(self) -> dict:
        return {"detail": self.message, "errors": self.errors}


class InvalidListOptions(FieldValidationError):
    default_message = "Invalid list options"


class InvalidTaskId(TaskboardError):
    status_code = 400
    default_message = "Invalid task id"


class TaskNotFound(TaskboardError):
    status_code = 404
    default_message = "Task not found"


class TaskLimitExceeded(TaskboardError):
    status_code = 409
    default_message = "Task limit reached"

    def __init__(self, limit: int):
        super().__init__(f"You can create up to {limit} tasks")
        self.limit = limit


class PersistenceFailure(TaskboardError):
    """Unexpected storage error; the original exception is kept on ``cause`` only."""

    status_code = 500
    default_message = "Operation failed"


class AuthError(TaskboardError):
    status_code = 401
    default_message = "Unauthorized"

    def to_payload(self) -> dict:
        return {"success": False, "error": self.message}


class RegistrationError(AuthError):
    status_code = 400
    default_message = "Registration failed"


class InvalidCredentials(AuthError):
    default_message = "Invalid email or password"


class InvalidToken(AuthError):
    default_message = "Invalid token"
