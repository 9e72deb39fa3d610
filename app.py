"""Main FastAPI application for the workflow Node Service."""

import logging
import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv('.env')

# Configure logging BEFORE importing any modules that use logger
log_level = os.getenv('LOG_LEVEL', 'INFO')
logging.basicConfig(
    level=getattr(logging, log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Import after logging is configured
from fastapi import FastAPI
from node_service import __version__
from node_service.dependencies import get_node_executor, get_orchestrator_proxy, get_settings
from node_service.orchestrator.registration import schedule_registration
from node_service.routers import node_router

# Create FastAPI app
app = FastAPI(
    title="Workflow Node Service",
    description="Node service that registers with the workflow orchestrator and executes node requests",
    version=__version__
)

# Include API routers
app.include_router(node_router)  # /install, /do


@app.on_event("startup")
async def startup_event():
    """Application startup event."""
    settings = get_settings()
    logger.info(f"Starting Node Service {settings.service.name} on {settings.service.host}")
    logger.info(f"  - Orchestrator: {settings.orchestrator.base_url}")
    logger.info(f"  - Processor: {settings.processor}")

    # Fail fast on a bad processor reference, before registering
    get_node_executor()

    # Registration runs in the background; the server is already accepting requests
    app.state.registration_task = schedule_registration(get_orchestrator_proxy(), settings.service)


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event."""
    logger.info("Shutting down Node Service")
    task = getattr(app.state, "registration_task", None)
    if task is not None and not task.done():
        task.cancel()


if __name__ == "__main__":
    import uvicorn
    host, _, port = get_settings().service.host.rpartition(":")
    port = int(os.getenv("PORT", port or "6100"))
    uvicorn.run("app:app", host=host or "0.0.0.0", port=port)
