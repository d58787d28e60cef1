"""
Provider entry point.

The Provider binds the registry to one configured session and runs
operations by type name.
"""

import logging
from typing import Any, Dict, List, Optional

from .clients import ProviderSession
from .config.settings import AppSettings, get_settings
from .registry import HandlerRegistry, default_registry
from .resources.base import (
    Handler,
    Operation,
    OperationResult,
    ResourceData,
    ResourceSchema,
)


class Provider:
    """IBM Cloud provider for the built-in resources and data sources."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        session: Optional[ProviderSession] = None,
        registry: Optional[HandlerRegistry] = None,
    ):
        self.settings = settings or get_settings()
        self.session = session or ProviderSession(self.settings.cloud)
        self.registry = registry or default_registry()
        self.logger = logging.getLogger(self.__class__.__name__)
        self._handlers: Dict[str, Handler] = {}

    def resource_types(self) -> List[str]:
        return self.registry.list_registered_types("resource")

    def data_source_types(self) -> List[str]:
        return self.registry.list_registered_types("data_source")

    def handler(self, type_name: str) -> Handler:
        """Get the handler for a type, creating it on first use."""
        if type_name not in self._handlers:
            self._handlers[type_name] = self.registry.create_handler(
                type_name, self.session, self.settings.polling
            )
        return self._handlers[type_name]

    async def get_schemas(self) -> Dict[str, ResourceSchema]:
        """Get the schema of every registered type."""
        schemas = {}
        for type_name in self.registry.list_registered_types():
            schemas[type_name] = await self.handler(type_name).get_schema()
        return schemas

    async def apply(
        self,
        type_name: str,
        operation: Operation,
        attributes: Optional[Dict[str, Any]] = None,
        resource_id: str = "",
        prior: Optional[Dict[str, Any]] = None,
        timeouts: Optional[Dict[str, float]] = None,
    ) -> OperationResult:
        """
        Run an operation against a type.

        Args:
            type_name: Registered resource or data source type
            operation: Lifecycle operation to run
            attributes: Desired configuration or known state
            resource_id: Identifier of an existing object
            prior: Last applied attributes, for updates
            timeouts: Per-operation timeouts in seconds

        Returns:
            OperationResult: Result of the operation
        """
        data = ResourceData(
            id=resource_id,
            attributes=dict(attributes or {}),
            prior=dict(prior or {}),
            timeouts=dict(timeouts or {}),
        )
        self.logger.debug(
            "Applying operation",
            extra={"type_name": type_name, "operation": operation.value, "resource_id": resource_id},
        )
        return await self.handler(type_name).apply(operation, data)
