"""Pytest configuration and fixtures for Node Service tests."""

import copy
import socket

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from node_service.dependencies import get_credential_store, get_node_executor, get_settings
from node_service.models.credentials import Credentials
from node_service.models.service import OrchestratorEndpoint, ServiceDescriptor
from node_service.orchestrator.proxy import OrchestratorProxy, RetryPolicy
from node_service.processing import resolve_processor
from node_service.routers import node_router
from node_service.services.credential_store import InMemoryCredentialStore
from node_service.services.node_executor import NodeExecutor
from node_service.services.settings_service import DEFAULT_SETTINGS, parse_settings


@pytest.fixture
def settings():
    """Default single-input echo node."""
    return parse_settings(DEFAULT_SETTINGS)


@pytest.fixture
def concat_settings():
    """Two string inputs concatenated into one output."""
    data = copy.deepcopy(DEFAULT_SETTINGS)
    data["processor"] = "concat"
    data["schema"]["nodeDefinitions"][0]["inputs"] = [
        {"fieldType": "string", "name": "inputField1", "label": "First"},
        {"fieldType": "string", "name": "inputField2", "label": "Second"},
    ]
    return parse_settings(data)


@pytest.fixture
def descriptor() -> ServiceDescriptor:
    return ServiceDescriptor(
        name="skeleton.herp.app",
        title="Python Skeleton Service",
        description="Test service",
        version="1.0.0",
        host="127.0.0.1:6100",
    )


@pytest.fixture
def memory_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore(Credentials(name="tester@example.com", password="secret"))


@pytest.fixture
def make_client(memory_store):
    """Build a TestClient for the node router bound to the given settings."""

    def _make(node_settings) -> TestClient:
        app = FastAPI()
        app.include_router(node_router)
        executor = NodeExecutor(
            node_settings.node_schema.primary,
            resolve_processor(node_settings.processor),
        )
        app.dependency_overrides[get_settings] = lambda: node_settings
        app.dependency_overrides[get_credential_store] = lambda: memory_store
        app.dependency_overrides[get_node_executor] = lambda: executor
        return TestClient(app)

    return _make


@pytest.fixture
def unused_port() -> int:
    """A local TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def endpoint(httpserver) -> OrchestratorEndpoint:
    """Orchestrator endpoint pointing at the pytest-httpserver mock."""
    return OrchestratorEndpoint(host=f"{httpserver.host}:{httpserver.port}")


@pytest.fixture
def proxy(endpoint, memory_store) -> OrchestratorProxy:
    return OrchestratorProxy(
        endpoint=endpoint,
        credential_store=memory_store,
        timeout=2,
        retry_policy=RetryPolicy(attempts=1),
    )


@pytest.fixture
def unreachable_proxy(unused_port, memory_store) -> OrchestratorProxy:
    return OrchestratorProxy(
        endpoint=OrchestratorEndpoint(host=f"127.0.0.1:{unused_port}"),
        credential_store=memory_store,
        timeout=2,
        retry_policy=RetryPolicy(attempts=1),
    )
