"""Static node configuration, loaded once at startup from YAML or inline defaults."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from node_service.constants import NODE_CONFIG_FILE, ORCHESTRATOR_ATTEMPTS, ORCHESTRATOR_TIMEOUT
from node_service.models.schema import NodeInterfaceSchema
from node_service.models.service import OrchestratorEndpoint, ServiceDescriptor

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Static configuration is missing, unreadable or invalid."""


class ClientSettings(BaseModel):
    """Outbound call policy towards the orchestrator."""

    # Defaults come from the environment and must pass the same bounds
    model_config = ConfigDict(frozen=True, validate_default=True)

    timeout: float = Field(default=ORCHESTRATOR_TIMEOUT, gt=0, description="Seconds per call")
    attempts: int = Field(default=ORCHESTRATOR_ATTEMPTS, ge=1, description="1 = no retries")
    backoff_seconds: float = Field(default=0.5, ge=0)


class NodeSettings(BaseModel):
    """Everything that is fixed for the lifetime of the process."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    service: ServiceDescriptor
    orchestrator: OrchestratorEndpoint
    client: ClientSettings = Field(default_factory=ClientSettings)
    processor: str = Field(default="echo", description="Built-in processor name or 'module:function'")
    node_schema: NodeInterfaceSchema = Field(..., alias="schema")


# Used when no config file exists
DEFAULT_SETTINGS: Dict[str, Any] = {
    "service": {
        "name": "skeleton.herp.app",
        "title": "Python Skeleton Service",
        "description": (
            "A skeleton service with all necessary functionality to talk with herp "
            "but without any logic. Feel free to integrate your ideas!"
        ),
        "version": "1.0.0",
        "host": "127.0.0.1:6100",
    },
    "orchestrator": {
        "host": "127.0.0.1:5050",
    },
    "processor": "echo",
    "schema": {
        "nodeDefinitions": [
            {
                "name": "myService",
                "label": "My Service Node",
                "inputs": [
                    {"fieldType": "string", "name": "inputField1", "label": "String input field."},
                ],
                "outputs": [
                    {"fieldType": "string", "name": "outputField", "label": "Output strings"},
                ],
            }
        ]
    },
}


def _client_env_overrides() -> Dict[str, Any]:
    """Client settings given through the environment; these win over the file."""
    overrides: Dict[str, Any] = {}
    timeout = os.getenv("ORCHESTRATOR_TIMEOUT", "")
    retries = os.getenv("ORCHESTRATOR_RETRIES", "")
    try:
        if timeout:
            overrides["timeout"] = float(timeout)
        if retries:
            overrides["attempts"] = int(retries) + 1
    except ValueError as e:
        raise ConfigurationError(f"Invalid orchestrator client setting in environment: {e}") from e
    return overrides


def apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment overrides into a raw settings mapping, leaving the input untouched."""
    overrides = _client_env_overrides()
    if not overrides:
        return data
    client = data.get("client") or {}
    if not isinstance(client, dict):
        raise ConfigurationError("'client' must be a mapping")
    return {**data, "client": {**client, **overrides}}


def parse_settings(data: Dict[str, Any]) -> NodeSettings:
    """Validate a raw settings mapping."""
    try:
        return NodeSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid node configuration: {e}") from e


def load_settings(config_file: Optional[Path] = None) -> NodeSettings:
    """Load settings from a YAML file, or the inline defaults if it does not exist.

    ORCHESTRATOR_TIMEOUT and ORCHESTRATOR_RETRIES, when set, override the
    client section of the file.

    Args:
        config_file: Path to the YAML file (defaults to NODE_CONFIG_FILE)

    Returns:
        Validated NodeSettings

    Raises:
        ConfigurationError: if the file cannot be parsed or fails validation
    """
    config_file = config_file or NODE_CONFIG_FILE

    if not config_file.exists():
        logger.info(f"No config file at {config_file}, using inline defaults")
        return parse_settings(apply_env_overrides(DEFAULT_SETTINGS))

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_file} must contain a mapping at the top level")

    settings = parse_settings(apply_env_overrides(data))
    logger.info(f"Loaded node configuration from {config_file}")
    return settings
