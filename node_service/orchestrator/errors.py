"""Typed failures of calls to the orchestrator."""

from typing import Optional


class OrchestratorError(Exception):
    """Base class for every orchestrator-facing failure."""


class OrchestratorConnectionError(OrchestratorError):
    """The orchestrator could not be reached, or did not answer in time."""


class MalformedResponse(OrchestratorError):
    """The orchestrator replied, but not with the expected shape."""


class ServiceNotFound(OrchestratorError):
    """No service record matches this service's name and title."""


class AuthorizationFailed(OrchestratorError):
    """No usable token could be obtained, or the orchestrator refused it."""


class InstallRejected(OrchestratorError):
    """The orchestrator declined the install confirmation."""


class RegistrationRejected(OrchestratorError):
    """The register call returned a non-success status."""

    def __init__(self, status: int, body: Optional[str] = None):
        self.status = status
        self.body = body
        message = f"Registration rejected with HTTP {status}"
        if body:
            message += f": {body[:200]}"
        super().__init__(message)
