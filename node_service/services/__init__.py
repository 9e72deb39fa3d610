"""Services for the Node Service."""

from .credential_store import CredentialStore, FileCredentialStore, InMemoryCredentialStore
from .node_executor import NodeExecutor, ProcessingContractError
from .settings_service import ConfigurationError, NodeSettings, load_settings

__all__ = [
    "CredentialStore",
    "FileCredentialStore",
    "InMemoryCredentialStore",
    "NodeExecutor",
    "ProcessingContractError",
    "ConfigurationError",
    "NodeSettings",
    "load_settings",
]
