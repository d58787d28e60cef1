"""
Managed resources for ibmcloud-resources.

This package provides the resource handler base classes and the VPC
resources built on them.
"""

from .base import (
    Attribute,
    AttributeType,
    DataSource,
    Diagnostic,
    Operation,
    OperationResult,
    Resource,
    ResourceData,
    ResourceSchema,
    Severity,
)
from .floating_ip import BareMetalServerFloatingIpResource
from .network_acl import NetworkAclResource

__all__ = [
    # Base classes
    "Attribute",
    "AttributeType",
    "DataSource",
    "Diagnostic",
    "Operation",
    "OperationResult",
    "Resource",
    "ResourceData",
    "ResourceSchema",
    "Severity",
    # VPC resources
    "BareMetalServerFloatingIpResource",
    "NetworkAclResource",
]
