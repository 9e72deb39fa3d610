"""Node endpoints called by the orchestrator: describe, install callback, execute."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from node_service.dependencies import get_credential_store, get_node_executor, get_settings
from node_service.models.credentials import Credentials
from node_service.services.credential_store import CredentialStore
from node_service.services.node_executor import NodeExecutor, ProcessingContractError
from node_service.services.settings_service import NodeSettings
from node_service.validation import PayloadValidationError, issues_from_pydantic, parse_json_object

logger = logging.getLogger(__name__)

router = APIRouter(tags=["node"])


@router.get("/install")
async def describe_node(settings: NodeSettings = Depends(get_settings)):
    """Called by the orchestrator when a user requests installation info.

    Returns the node interface schema used to render the node in the UI.
    """
    return JSONResponse(content=settings.node_schema.to_wire())


@router.post("/install")
async def install_callback(
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
):
    """Called by the orchestrator after a successful installation.

    Request Body:
        - name: str - orchestrator account used for later logins
        - password: str

    The pair replaces the stored credentials; later orchestrator calls use it.
    """
    try:
        payload = parse_json_object(await request.body())
        credentials = Credentials.model_validate(payload)
    except PayloadValidationError as e:
        logger.warning(f"[Node] Rejected install callback: {e.message}")
        return JSONResponse(status_code=400, content=e.to_detail())
    except ValidationError as e:
        error = PayloadValidationError(issues_from_pydantic(e))
        logger.warning(f"[Node] Rejected install callback: {error.message}")
        return JSONResponse(status_code=400, content=error.to_detail())

    await run_in_threadpool(store.store, credentials)
    logger.info(f"[Node] Service is installed for user {credentials.name}")
    return {}


@router.post("/do")
async def run_node(
    request: Request,
    executor: NodeExecutor = Depends(get_node_executor),
):
    """Called whenever a node instance of this service is triggered in a workflow.

    The body must carry every declared input field with its declared type;
    the response maps every declared output field to its value.
    """
    try:
        payload = parse_json_object(await request.body())
        result = await run_in_threadpool(executor.execute, payload)
    except PayloadValidationError as e:
        logger.info(f"[Node] Rejected /do request: {e.message}")
        return JSONResponse(status_code=400, content=e.to_detail())
    except ProcessingContractError as e:
        logger.error(f"[Node] Processing function broke its contract: {e}")
        raise HTTPException(status_code=500, detail="Processing function returned an invalid result")

    return result
