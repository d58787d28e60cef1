"""
Handler registry for resources and data sources.

This module provides a factory for registering handler classes by type
name and creating instances bound to a provider session.
"""

import logging
from typing import Dict, List, Optional, Type

from .clients import ProviderSession
from .config.settings import PollingSettings
from .data_sources import (
    CodeEngineFunctionDataSource,
    ImageExportJobDataSource,
    InstanceGroupManagersDataSource,
)
from .resources import BareMetalServerFloatingIpResource, NetworkAclResource
from .resources.base import Handler


class HandlerRegistry:
    """Registry for resource and data source implementations."""

    def __init__(self):
        """Initialize the handler registry."""
        self._handlers: Dict[str, Type[Handler]] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def register(self, handler_class: Type[Handler]) -> None:
        """
        Register a handler implementation under its type name.

        Args:
            handler_class: The resource or data source class

        Raises:
            ValueError: If the class has no type name or the name is taken
        """
        type_name = handler_class.type_name
        if not type_name:
            raise ValueError(f"{handler_class.__name__} does not define a type_name")
        existing = self._handlers.get(type_name)
        if existing is not None and existing is not handler_class:
            raise ValueError(f"Type {type_name} is already registered")
        self._handlers[type_name] = handler_class
        self.logger.debug(f"Registered handler: {type_name}")

    def get_handler_class(self, type_name: str) -> Optional[Type[Handler]]:
        """
        Get a registered handler class.

        Args:
            type_name: The resource or data source type name

        Returns:
            The handler class or None if not found
        """
        return self._handlers.get(type_name)

    def create_handler(
        self,
        type_name: str,
        session: ProviderSession,
        polling: Optional[PollingSettings] = None,
    ) -> Handler:
        """
        Create a handler bound to a session.

        Raises:
            ValueError: If the type is not registered
        """
        handler_class = self.get_handler_class(type_name)
        if not handler_class:
            raise ValueError(f"Type {type_name} is not registered")
        return handler_class(session, polling)

    def list_registered_types(self, kind: Optional[str] = None) -> List[str]:
        """List registered type names, optionally only one kind."""
        return sorted(
            name
            for name, handler_class in self._handlers.items()
            if kind is None or handler_class.kind == kind
        )

    def is_registered(self, type_name: str) -> bool:
        return type_name in self._handlers


def default_registry() -> HandlerRegistry:
    """Create a registry holding every built-in resource and data source."""
    registry = HandlerRegistry()
    for handler_class in (
        NetworkAclResource,
        BareMetalServerFloatingIpResource,
        InstanceGroupManagersDataSource,
        ImageExportJobDataSource,
        CodeEngineFunctionDataSource,
    ):
        registry.register(handler_class)
    return registry
