"""
Exception hierarchy for resource and data source operations.

Every error raised by an operation derives from ProviderError and carries
the resource type, the operation and the step that failed so diagnostics
can name exactly where a lifecycle call stopped.
"""

from typing import Optional


class ProviderError(Exception):
    """Base exception for provider-related errors."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        operation: Optional[str] = None,
        step: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.resource_type = resource_type
        self.operation = operation
        self.step = step

    def __str__(self) -> str:
        context = [
            part for part in (self.resource_type, self.operation, self.step) if part
        ]
        if context:
            return f"[{' '.join(context)}] {self.message}"
        return self.message


class ClientInitializationError(ProviderError):
    """Exception raised when an SDK client cannot be constructed."""


class RemoteCallError(ProviderError):
    """Exception raised when an SDK call fails with anything but not-found."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        resource_type: Optional[str] = None,
        operation: Optional[str] = None,
        step: Optional[str] = None,
    ):
        super().__init__(message, resource_type, operation, step)
        self.status_code = status_code


class ResourceValidationError(ProviderError):
    """Exception raised when user input is rejected before any remote call."""


class MalformedIdentifierError(ResourceValidationError):
    """Exception raised when a composite identifier cannot be parsed."""


class PollTimeoutError(ProviderError):
    """Exception raised when a poll does not reach a target state in time."""

    def __init__(self, message: str, last_status: Optional[str] = None, **context):
        super().__init__(message, **context)
        self.last_status = last_status


class PollCancelledError(ProviderError):
    """Exception raised when a poll is cancelled."""


class UnexpectedStateError(ProviderError):
    """Exception raised when a poll observes a state it does not know."""

    def __init__(self, message: str, status: Optional[str] = None, **context):
        super().__init__(message, **context)
        self.status = status


class TagSyncError(ProviderError):
    """Exception raised when tags cannot be attached or detached."""
