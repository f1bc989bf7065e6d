"""
Error taxonomy shared by the client library, the backend and the edge relay.

Every error carries a user-facing ``message`` and the HTTP ``status_code`` it is
re-expressed with at a service boundary.
"""

from typing import Optional

__all__ = [
    "SareeStageError",
    "ValidationError",
    "InvalidFileType",
    "FileTooLarge",
    "MissingInputError",
    "AuthenticationError",
    "TransportError",
    "SafetyBlocked",
    "RateLimited",
    "UpstreamError",
    "GenerationError",
    "UpstreamMisconfigured",
    "PersistenceError",
    "InsufficientCredits",
    "UnknownPlanError",
    "WorkflowBusyError",
    "InvalidTransitionError",
]


class SareeStageError(Exception):
    """Base class for errors that are safe to show to a user."""

    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(SareeStageError):
    """Bad input caught locally, never sent to the network."""

    status_code = 400
    default_message = "The request is invalid."


class InvalidFileType(ValidationError):
    default_message = "Invalid file type. Please use JPEG or PNG."


class FileTooLarge(ValidationError):
    default_message = "File is too large. Maximum size is 10MB."


class MissingInputError(ValidationError):
    default_message = "A required input is missing."


class AuthenticationError(ValidationError):
    status_code = 401
    default_message = (
        "Invalid email or password. Password must be at least 6 characters."
    )


class TransportError(SareeStageError):
    status_code = 502
    default_message = "Could not reach the generation service. Please try again."


class SafetyBlocked(SareeStageError):
    status_code = 422
    default_message = (
        "The generation was blocked for safety reasons. This can sometimes happen "
        "with images of people. Please try a different photo."
    )


class RateLimited(SareeStageError):
    status_code = 429
    default_message = (
        "The service is currently experiencing high traffic. "
        "Please wait a moment and try again."
    )


class UpstreamError(SareeStageError):
    status_code = 502
    default_message = (
        "A server-side error occurred. We've been notified and are looking into it. "
        "Please try again later."
    )


class GenerationError(SareeStageError):
    status_code = 500
    default_message = (
        "The model did not return an image. This could be due to the prompt, safety "
        "filters, or an inability to process the request. Please try different "
        "images or tweak your instructions."
    )


class UpstreamMisconfigured(SareeStageError):
    status_code = 500
    default_message = "Server configuration error."


class PersistenceError(SareeStageError):
    status_code = 507
    default_message = (
        "Your credit balance could not be saved on this device. "
        "Credit bookkeeping may be out of date."
    )


class InsufficientCredits(SareeStageError):
    status_code = 402
    default_message = "You have no credits left. Choose a plan to keep generating."

    def __init__(self, message: Optional[str] = None, destination: str = "pricing"):
        super().__init__(message)
        self.destination = destination


class UnknownPlanError(SareeStageError):
    status_code = 404
    default_message = "Unknown plan."


class WorkflowBusyError(RuntimeError):
    """Raised when a trigger fires while a generation is already in flight."""


class InvalidTransitionError(RuntimeError):
    """Raised when an operation is not allowed in the current workflow state."""
