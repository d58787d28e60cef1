"""
Base resource interface and shared models.

This module defines the handler abstraction every resource and data source
implements: a published schema, lifecycle operations over ResourceData, and
a single entry point that turns provider errors into diagnostics.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ibm_cloud_sdk_core import ApiException
from pydantic import BaseModel, Field

from ..clients import ProviderSession, is_not_found
from ..config.settings import PollingSettings
from ..errors import ProviderError, RemoteCallError, ResourceValidationError


class Operation(Enum):
    """Lifecycle operation."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    EXISTS = "exists"


class Severity(Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


class AttributeType(Enum):
    """Value type of a schema attribute."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    LIST = "list"
    SET = "set"
    MAP = "map"


class Diagnostic(BaseModel):
    """A problem reported by an operation."""

    severity: Severity
    summary: str
    detail: str = ""


class Attribute(BaseModel):
    """Schema entry for a single attribute."""

    type: AttributeType
    description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    force_new: bool = False
    default: Optional[Any] = None
    max_items: Optional[int] = None
    elements: Dict[str, "Attribute"] = Field(default_factory=dict)
    element_type: Optional[AttributeType] = None


class ResourceSchema(BaseModel):
    """Schema describing a resource or data source."""

    type_name: str
    description: str
    kind: str = "resource"  # resource or data_source
    attributes: Dict[str, Attribute] = Field(default_factory=dict)
    timeouts: List[str] = Field(default_factory=list)


class ResourceData(BaseModel):
    """
    Mutable state handed to every operation.

    ``attributes`` holds the desired configuration merged with the current
    remote values. ``prior`` holds the last applied attributes and drives
    change detection during updates.
    """

    id: str = ""
    attributes: Dict[str, Any] = Field(default_factory=dict)
    prior: Dict[str, Any] = Field(default_factory=dict)
    timeouts: Dict[str, float] = Field(default_factory=dict)
    diagnostics: List[Diagnostic] = Field(default_factory=list)

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        """Get a value and whether it is set to something non-empty."""
        value = self.attributes.get(key)
        return value, value not in (None, "", [], {})

    def set(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def set_id(self, identifier: str) -> None:
        self.id = identifier

    def has_change(self, key: str) -> bool:
        old, new = self.get_change(key)
        return old != new

    def get_change(self, key: str) -> Tuple[Any, Any]:
        """Get the ``(prior, current)`` values of an attribute."""
        return self.prior.get(key), self.attributes.get(key)

    def timeout(self, operation: str, default: float = 600.0) -> float:
        return self.timeouts.get(operation, default)

    def state(self) -> Dict[str, Any]:
        """Get the attributes together with the id."""
        return {"id": self.id, **self.attributes}


class OperationResult(BaseModel):
    """Result of applying an operation."""

    success: bool
    type_name: str
    operation: str
    id: str = ""
    state: Dict[str, Any] = Field(default_factory=dict)
    exists: Optional[bool] = None
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    duration: Optional[float] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Handler(ABC):
    """
    Base interface for resources and data sources.

    Subclasses set ``type_name`` and implement their operations as
    coroutines taking a ResourceData. SDK calls go through ``_call`` and
    ``_fetch`` so every failure is reported with the SDK operation name.
    """

    type_name: str = ""
    kind: str = "resource"

    def __init__(
        self, session: ProviderSession, polling: Optional[PollingSettings] = None
    ):
        self.session = session
        self.polling = polling or PollingSettings()
        self.logger = logging.getLogger(f"{self.__class__.__name__}:{self.type_name}")

    @abstractmethod
    async def get_schema(self) -> ResourceSchema:
        """Return the handler's schema."""

    @abstractmethod
    def supported_operations(self) -> Dict[Operation, Callable[[ResourceData], Any]]:
        """Map each supported operation to its coroutine."""

    async def apply(self, operation: Operation, data: ResourceData) -> OperationResult:
        """
        Run an operation and report the outcome.

        Provider errors become a failed result with an error diagnostic.
        Anything else propagates to the caller.

        Args:
            operation: The operation to run
            data: Resource state, updated in place

        Returns:
            OperationResult: Result of the operation
        """
        start_time = datetime.utcnow()
        operations = self.supported_operations()
        exists: Optional[bool] = None

        if operation not in operations:
            return OperationResult(
                success=False,
                type_name=self.type_name,
                operation=operation.value,
                id=data.id,
                diagnostics=[
                    Diagnostic(
                        severity=Severity.ERROR,
                        summary=f"Unsupported operation: {operation.value}",
                    )
                ],
            )

        try:
            outcome = await operations[operation](data)
            if operation == Operation.EXISTS:
                exists = bool(outcome)

        except ProviderError as e:
            duration = (datetime.utcnow() - start_time).total_seconds()
            self.logger.error(
                "Operation failed",
                extra={
                    "type_name": self.type_name,
                    "operation": operation.value,
                    "step": e.step,
                    "resource_id": data.id,
                    "error_type": type(e).__name__,
                    "error_message": e.message,
                    "duration_seconds": duration,
                },
            )
            return OperationResult(
                success=False,
                type_name=self.type_name,
                operation=operation.value,
                id=data.id,
                state=data.state(),
                diagnostics=data.diagnostics
                + [
                    Diagnostic(
                        severity=Severity.ERROR,
                        summary=f"Error during {operation.value} of {self.type_name}",
                        detail=str(e),
                    )
                ],
                duration=duration,
            )

        duration = (datetime.utcnow() - start_time).total_seconds()
        self.logger.info(
            "Operation completed",
            extra={
                "type_name": self.type_name,
                "operation": operation.value,
                "resource_id": data.id,
                "duration_seconds": duration,
            },
        )
        return OperationResult(
            success=True,
            type_name=self.type_name,
            operation=operation.value,
            id=data.id,
            state=data.state(),
            exists=exists,
            diagnostics=list(data.diagnostics),
            duration=duration,
        )

    def _error_context(self, operation: str, step: str) -> Dict[str, str]:
        return {"resource_type": self.type_name, "operation": operation, "step": step}

    def _call(
        self, operation: str, step: str, method: Callable[..., Any], *args, **kwargs
    ) -> Dict[str, Any]:
        """Invoke an SDK method and return its decoded result."""
        try:
            response = method(*args, **kwargs)
        except ApiException as e:
            raise RemoteCallError(
                f"{step} failed: {e.message}",
                status_code=e.code,
                **self._error_context(operation, step),
            )
        return response.get_result() or {}

    def _fetch(
        self, operation: str, step: str, method: Callable[..., Any], *args, **kwargs
    ) -> Optional[Dict[str, Any]]:
        """Invoke an SDK getter, returning None when the object is absent."""
        try:
            response = method(*args, **kwargs)
        except ApiException as e:
            if is_not_found(e):
                return None
            raise RemoteCallError(
                f"{step} failed: {e.message}",
                status_code=e.code,
                **self._error_context(operation, step),
            )
        return response.get_result() or {}

    def _invalid(self, operation: str, message: str) -> ResourceValidationError:
        return ResourceValidationError(
            message, **self._error_context(operation, "validate")
        )

    def _warn(self, data: ResourceData, summary: str, error: Exception) -> None:
        """Record a non-fatal problem on the resource."""
        self.logger.warning(
            summary,
            extra={
                "type_name": self.type_name,
                "resource_id": data.id,
                "error_type": type(error).__name__,
                "error_message": str(error),
            },
        )
        data.diagnostics.append(
            Diagnostic(severity=Severity.WARNING, summary=summary, detail=str(error))
        )


class Resource(Handler):
    """Managed resource with a full lifecycle."""

    kind = "resource"

    def supported_operations(self) -> Dict[Operation, Callable[[ResourceData], Any]]:
        return {
            Operation.CREATE: self.create,
            Operation.READ: self.read,
            Operation.UPDATE: self.update,
            Operation.DELETE: self.delete,
            Operation.EXISTS: self.exists,
        }

    @abstractmethod
    async def create(self, data: ResourceData) -> None:
        """Create the remote object and populate ``data``."""

    @abstractmethod
    async def read(self, data: ResourceData) -> None:
        """Refresh ``data``; clear its id when the object is gone."""

    @abstractmethod
    async def update(self, data: ResourceData) -> None:
        """Apply attribute changes to the remote object."""

    @abstractmethod
    async def delete(self, data: ResourceData) -> None:
        """Delete the remote object and clear the id."""

    @abstractmethod
    async def exists(self, data: ResourceData) -> bool:
        """Check whether the remote object still exists."""


class DataSource(Handler):
    """Read-only lookup."""

    kind = "data_source"

    def supported_operations(self) -> Dict[Operation, Callable[[ResourceData], Any]]:
        return {Operation.READ: self.read}

    @abstractmethod
    async def read(self, data: ResourceData) -> None:
        """Look up the object and populate ``data``."""
