"""Dependency injection container for services."""

import logging
from typing import Optional

from node_service.constants import CREDENTIALS_FILE
from node_service.orchestrator.proxy import OrchestratorProxy, RetryPolicy
from node_service.processing import resolve_processor
from node_service.services.credential_store import CredentialStore, FileCredentialStore
from node_service.services.node_executor import NodeExecutor
from node_service.services.settings_service import NodeSettings, load_settings

logger = logging.getLogger(__name__)

# ============================================================================
# Global service instances (Singleton pattern, but exposed via functions for easier testing/mocking)
# ============================================================================

_settings_instance: Optional[NodeSettings] = None
_credential_store_instance: Optional[CredentialStore] = None
_orchestrator_proxy_instance: Optional[OrchestratorProxy] = None
_node_executor_instance: Optional[NodeExecutor] = None


def get_settings() -> NodeSettings:
    """Get static node settings (singleton)."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = load_settings()
        logger.info(f"Loaded settings for service {_settings_instance.service.name}")
    return _settings_instance


def get_credential_store() -> CredentialStore:
    """Get credential store (singleton)."""
    global _credential_store_instance
    if _credential_store_instance is None:
        _credential_store_instance = FileCredentialStore(CREDENTIALS_FILE)
        logger.info(f"Created FileCredentialStore at {CREDENTIALS_FILE}")
    return _credential_store_instance


def build_orchestrator_proxy(settings: NodeSettings, store: CredentialStore) -> OrchestratorProxy:
    """Create a proxy honouring the configured timeout and retry policy."""
    return OrchestratorProxy(
        endpoint=settings.orchestrator,
        credential_store=store,
        timeout=settings.client.timeout,
        retry_policy=RetryPolicy(
            attempts=settings.client.attempts,
            backoff_seconds=settings.client.backoff_seconds,
        ),
    )


def get_orchestrator_proxy() -> OrchestratorProxy:
    """Get orchestrator proxy (singleton)."""
    global _orchestrator_proxy_instance
    if _orchestrator_proxy_instance is None:
        settings = get_settings()
        _orchestrator_proxy_instance = build_orchestrator_proxy(settings, get_credential_store())
        logger.info(f"Created OrchestratorProxy for {settings.orchestrator.base_url}")
    return _orchestrator_proxy_instance


def get_node_executor() -> NodeExecutor:
    """Get node executor for the primary node definition (singleton)."""
    global _node_executor_instance
    if _node_executor_instance is None:
        settings = get_settings()
        _node_executor_instance = NodeExecutor(
            definition=settings.node_schema.primary,
            processor=resolve_processor(settings.processor),
        )
        logger.info(f"Created NodeExecutor with processor '{settings.processor}'")
    return _node_executor_instance


# Test utility function (for unit testing - resets all singletons)
def reset_services():
    """Reset all service instances (only for testing)."""
    global _settings_instance, _credential_store_instance, _orchestrator_proxy_instance, _node_executor_instance

    _settings_instance = None
    _credential_store_instance = None
    _orchestrator_proxy_instance = None
    _node_executor_instance = None
    logger.info("Reset all service instances")
