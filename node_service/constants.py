"""Global constants for the Node Service."""

import os
from pathlib import Path

# Timeout for every outbound orchestrator call (seconds)
ORCHESTRATOR_TIMEOUT = float(os.getenv("ORCHESTRATOR_TIMEOUT", "10"))

# Total attempts per orchestrator call (1 = no retries)
ORCHESTRATOR_ATTEMPTS = int(os.getenv("ORCHESTRATOR_RETRIES", "0")) + 1

# Directory paths
SERVICE_ROOT = Path(__file__).resolve().parent.parent

_config_file_env = os.getenv("NODE_CONFIG_FILE", "")
NODE_CONFIG_FILE = Path(_config_file_env) if _config_file_env else SERVICE_ROOT / "config" / "node.yaml"

DATA_DIR = SERVICE_ROOT / "data"

_credentials_env = os.getenv("CREDENTIALS_FILE", "")
CREDENTIALS_FILE = Path(_credentials_env) if _credentials_env else DATA_DIR / "credentials.json"

# Placeholder used until the orchestrator delivers real credentials
DEFAULT_CREDENTIALS_NAME = "your-email@example.com"
DEFAULT_CREDENTIALS_PASSWORD = "admin"
