"""Credential store - persists the orchestrator login across restarts (Thread-safe)."""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from node_service.models.credentials import Credentials

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Holds the single current Credentials value.

    Implementations must make store() and load() mutually exclusive so a
    reader never observes a half-written pair.
    """

    @abstractmethod
    def load(self) -> Credentials:
        """Return the current credentials (placeholder if none stored yet)."""
        ...

    @abstractmethod
    def store(self, credentials: Credentials) -> None:
        """Replace the current credentials."""
        ...


class InMemoryCredentialStore(CredentialStore):
    """Process-local store, used in tests and for throwaway deployments."""

    def __init__(self, initial: Optional[Credentials] = None):
        self._credentials = initial or Credentials.default()
        self._lock = threading.Lock()

    def load(self) -> Credentials:
        with self._lock:
            return self._credentials

    def store(self, credentials: Credentials) -> None:
        with self._lock:
            self._credentials = credentials


class FileCredentialStore(CredentialStore):
    """Stores credentials as a JSON record on local disk.

    File format:
    {
        "name": "your-email@example.com",
        "password": "admin"
    }

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace(), so the file is always either the old or the new
    record.
    """

    def __init__(self, credentials_file: Path):
        self.credentials_file = credentials_file
        self._lock = threading.Lock()

    def load(self) -> Credentials:
        with self._lock:
            return self._load()

    def store(self, credentials: Credentials) -> None:
        with self._lock:
            self._save(credentials)
        logger.info(f"Stored credentials for {credentials.name}")

    def _load(self) -> Credentials:
        """Load from file, falling back to the placeholder pair."""
        if not self.credentials_file.exists():
            logger.debug(f"No credentials file at {self.credentials_file}, using placeholder")
            return Credentials.default()

        try:
            with open(self.credentials_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Credentials.model_validate(data)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error loading credentials file: {e}")
        except ValidationError as e:
            logger.error(f"Invalid credentials record in {self.credentials_file}: {e.error_count()} error(s)")

        return Credentials.default()

    def _save(self, credentials: Credentials) -> None:
        self.credentials_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.credentials_file.parent, prefix=".credentials-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(credentials.model_dump(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.credentials_file)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.debug(f"Saved credentials to {self.credentials_file}")
