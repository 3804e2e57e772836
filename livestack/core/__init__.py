"""Core graph model for livestack."""

from livestack.core.errors import (
    LivestackError,
    GraphConstructionError,
    UnresolvedValueError,
    ConfigurationError,
    ProvisioningFailure,
)
from livestack.core.resource import (
    GeneratedValue,
    ResourceDeclaration,
    ResourceKind,
    ResourceState,
)
from livestack.core.graph import ResourceGraph, GraphNode

__all__ = [
    "LivestackError",
    "GraphConstructionError",
    "UnresolvedValueError",
    "ConfigurationError",
    "ProvisioningFailure",
    "GeneratedValue",
    "ResourceDeclaration",
    "ResourceKind",
    "ResourceState",
    "ResourceGraph",
    "GraphNode",
]
