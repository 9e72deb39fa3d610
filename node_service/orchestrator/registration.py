"""One-shot registration of this service at process startup."""

import asyncio
import logging
import os
import signal
from typing import Callable

from node_service.models.service import ServiceDescriptor
from node_service.orchestrator.errors import OrchestratorError
from node_service.orchestrator.proxy import OrchestratorProxy

logger = logging.getLogger(__name__)


def request_shutdown() -> None:
    """Ask the server process to terminate (uvicorn handles SIGTERM gracefully)."""
    os.kill(os.getpid(), signal.SIGTERM)


async def register_on_startup(
    proxy: OrchestratorProxy,
    descriptor: ServiceDescriptor,
    on_failure: Callable[[], None] = request_shutdown,
) -> bool:
    """Register with the orchestrator; terminate the process if that fails.

    An unregistered service is unreachable for the orchestrator, so there is
    nothing useful left to do without it.

    Returns:
        True if registered
    """
    try:
        await proxy.register(descriptor)
    except OrchestratorError as e:
        logger.critical(
            f"Registration failed. Check that the orchestrator is running on "
            f"{proxy.endpoint.host}: {e}"
        )
        on_failure()
        return False

    logger.info(f"Registered service to orchestrator on {descriptor.host}")
    return True


def schedule_registration(
    proxy: OrchestratorProxy,
    descriptor: ServiceDescriptor,
    on_failure: Callable[[], None] = request_shutdown,
) -> asyncio.Task:
    """Start registration in the background so the server keeps accepting requests."""
    return asyncio.create_task(
        register_on_startup(proxy, descriptor, on_failure), name="orchestrator-registration"
    )
