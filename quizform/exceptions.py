from typing import Dict


class QuizFormError(Exception):
    """Base class for request-level errors raised by the service layer."""


class NotFoundError(QuizFormError):
    """Raised when a template, response, comment or user does not exist."""


class TemplateInactiveError(QuizFormError):
    """Raised when a response is submitted to a template that is not active."""


class PermissionDeniedError(QuizFormError):
    """Raised when the current user may not act on a resource."""


class ResponseValidationError(QuizFormError):
    """Raised when submitted answers fail validation. Carries every field error."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(f"{len(errors)} answer(s) failed validation")
        self.errors = errors


class PersistenceError(QuizFormError):
    """Raised when the database rejects a write."""
