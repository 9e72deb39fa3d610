"""Data models for the Node Service."""

from .credentials import Credentials
from .schema import FIELD_TYPES, FieldDescriptor, NodeDefinition, NodeInterfaceSchema
from .service import InstallResult, OrchestratorEndpoint, ServiceDescriptor, ServiceRecord

__all__ = [
    "Credentials",
    "FIELD_TYPES",
    "FieldDescriptor",
    "NodeDefinition",
    "NodeInterfaceSchema",
    "InstallResult",
    "OrchestratorEndpoint",
    "ServiceDescriptor",
    "ServiceRecord",
]
