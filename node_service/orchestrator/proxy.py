"""Orchestrator proxy - every outbound call this service makes to the orchestrator."""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
from pydantic import ValidationError

from node_service.constants import ORCHESTRATOR_ATTEMPTS, ORCHESTRATOR_TIMEOUT
from node_service.models.credentials import Credentials
from node_service.models.service import (
    InstallResult,
    OrchestratorEndpoint,
    ServiceDescriptor,
    ServiceRecord,
)
from node_service.orchestrator.errors import (
    AuthorizationFailed,
    InstallRejected,
    MalformedResponse,
    OrchestratorConnectionError,
    OrchestratorError,
    RegistrationRejected,
    ServiceNotFound,
)
from node_service.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How often a call is re-sent after a transport failure.

    Only connection errors and timeouts are retried; any HTTP reply, good or
    bad, is final. attempts=1 means no retries.
    """

    attempts: int = ORCHESTRATOR_ATTEMPTS
    backoff_seconds: float = 0.5

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError(f"RetryPolicy needs at least 1 attempt, got {self.attempts}")
        if self.backoff_seconds < 0:
            raise ValueError(f"RetryPolicy backoff must not be negative, got {self.backoff_seconds}")


@dataclass(frozen=True)
class _Reply:
    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class OrchestratorProxy:
    """Client for the orchestrator's register/login/services/install surface.

    Used by the startup registration task and by the admin CLI. A fresh
    token is obtained for every operation that needs one; nothing is cached.
    """

    def __init__(
        self,
        endpoint: OrchestratorEndpoint,
        credential_store: CredentialStore,
        timeout: float = ORCHESTRATOR_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        # aiohttp treats a non-positive total as "no timeout"
        if timeout <= 0:
            raise ValueError(f"Orchestrator timeout must be positive, got {timeout}")
        self.endpoint = endpoint
        self.credential_store = credential_store
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        # Lookups that matched more than one service record
        self.duplicate_matches = 0

    async def register(self, descriptor: ServiceDescriptor) -> None:
        """Announce this service to the orchestrator.

        Raises:
            OrchestratorConnectionError: orchestrator unreachable
            RegistrationRejected: non-2xx reply
        """
        url = self.endpoint.url_for("register")
        reply = await self._request("POST", url, payload=descriptor.to_register_payload())
        if not reply.ok:
            raise RegistrationRejected(reply.status, reply.text)
        logger.info(f"[Orchestrator] Registered {descriptor.name} ({descriptor.host}) at {url}")

    async def authenticate(self, credentials: Optional[Credentials] = None) -> str:
        """Log in and return a fresh token.

        Args:
            credentials: Explicit credentials; loaded from the store when omitted

        Raises:
            OrchestratorConnectionError: orchestrator unreachable
            MalformedResponse: reply without a string 'token'
        """
        if credentials is None:
            credentials = await asyncio.to_thread(self.credential_store.load)
        url = self.endpoint.url_for("login")
        reply = await self._request("POST", url, payload=credentials.to_login_payload())

        body = self._decode_json(reply, "login")
        token = body.get("token") if isinstance(body, dict) else None
        if not isinstance(token, str):
            raise MalformedResponse(
                f"Login reply (HTTP {reply.status}) has no string 'token' field"
            )
        logger.info(f"[Orchestrator] Authenticated as {credentials.name}")
        return token

    async def resolve_service_id(self, token: str, descriptor: ServiceDescriptor) -> str:
        """Find the orchestrator-assigned id of this service.

        The first record whose name and title match exactly wins.

        Raises:
            OrchestratorConnectionError: orchestrator unreachable
            AuthorizationFailed: token refused (401/403)
            MalformedResponse: reply is not JSON, or the match has no string '_id'
            ServiceNotFound: no 'data' array, or no matching record
        """
        url = self.endpoint.url_for("services")
        reply = await self._request("GET", url, token=token)
        if reply.status in (401, 403):
            raise AuthorizationFailed(f"Service listing refused the token (HTTP {reply.status})")

        body = self._decode_json(reply, "service listing")
        records = body.get("data") if isinstance(body, dict) else None
        if not isinstance(records, list):
            raise ServiceNotFound("Service listing has no 'data' array")

        matches = [
            record
            for record in records
            if isinstance(record, dict)
            and record.get("name") == descriptor.name
            and record.get("title") == descriptor.title
        ]
        if not matches:
            raise ServiceNotFound(
                f"Service not found: name={descriptor.name!r}, title={descriptor.title!r}"
            )

        if len(matches) > 1:
            self.duplicate_matches += 1
            logger.warning(
                f"[Orchestrator] {len(matches)} service records share name={descriptor.name!r} "
                f"and title={descriptor.title!r}; using the first. Upstream data quality issue "
                f"(seen in {self.duplicate_matches} lookup(s))"
            )

        try:
            record = ServiceRecord.model_validate(matches[0])
        except ValidationError as e:
            raise MalformedResponse(
                f"Service record for {descriptor.name!r} has no string '_id'"
            ) from e
        return record.id

    async def confirm_install(
        self,
        descriptor: ServiceDescriptor,
        credentials: Optional[Credentials] = None,
    ) -> InstallResult:
        """Authenticate, resolve our service id and confirm the installation.

        Raises:
            AuthorizationFailed: authentication failed for any reason
            ServiceNotFound / MalformedResponse: resolution failed
            OrchestratorConnectionError: orchestrator unreachable after login
            InstallRejected: non-2xx reply, or a reply that is not a JSON string
        """
        try:
            token = await self.authenticate(credentials)
        except OrchestratorError as e:
            raise AuthorizationFailed(f"Authorization failed: {e}") from e

        service_id = await self.resolve_service_id(token, descriptor)
        logger.info(f"[Orchestrator] Confirming install of service {service_id}")

        url = self.endpoint.url_for("install", service_id)
        reply = await self._request("GET", url, token=token)
        if not reply.ok:
            raise InstallRejected(f"Installation rejected (HTTP {reply.status})")

        try:
            body = self._decode_json(reply, "install")
        except MalformedResponse as e:
            raise InstallRejected(f"Installation rejected: {e}") from e
        if not isinstance(body, str):
            raise InstallRejected(
                f"Installation rejected: expected a JSON string, got {type(body).__name__}"
            )

        logger.info(f"[Orchestrator] Install confirmed: {body}")
        return InstallResult(message=body)

    async def _request(
        self,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> _Reply:
        """Send one request, retrying transport failures per the retry policy."""
        headers = {"content-type": "application/json"}
        if token is not None:
            headers["Authorization"] = token

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        attempts = self.retry_policy.attempts
        last_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            try:
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    async with session.request(method, url, json=payload, headers=headers) as response:
                        raw = await response.read()
                        reply = _Reply(response.status, raw.decode("utf-8", errors="replace"))
                logger.debug(f"[Orchestrator] {method} {url} -> HTTP {reply.status}")
                return reply
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                logger.warning(
                    f"[Orchestrator] {method} {url} failed "
                    f"(attempt {attempt}/{attempts}): {e!r}"
                )
                if attempt < attempts:
                    await asyncio.sleep(self.retry_policy.backoff_seconds * attempt)

        raise OrchestratorConnectionError(
            f"Cannot reach orchestrator at {url}: {last_error!r}"
        ) from last_error

    @staticmethod
    def _decode_json(reply: _Reply, what: str) -> Any:
        try:
            return json.loads(reply.text)
        except json.JSONDecodeError as e:
            raise MalformedResponse(
                f"{what} reply (HTTP {reply.status}) is not valid JSON: {e}"
            ) from e
