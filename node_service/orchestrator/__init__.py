"""Orchestrator client: registration, login, service lookup and install confirmation."""

from .errors import (
    AuthorizationFailed,
    InstallRejected,
    MalformedResponse,
    OrchestratorConnectionError,
    OrchestratorError,
    RegistrationRejected,
    ServiceNotFound,
)
from .proxy import OrchestratorProxy, RetryPolicy
from .registration import register_on_startup, schedule_registration

__all__ = [
    "AuthorizationFailed",
    "InstallRejected",
    "MalformedResponse",
    "OrchestratorConnectionError",
    "OrchestratorError",
    "RegistrationRejected",
    "ServiceNotFound",
    "OrchestratorProxy",
    "RetryPolicy",
    "register_on_startup",
    "schedule_registration",
]
