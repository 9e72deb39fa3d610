"""Models describing this service and the orchestrator it talks to."""

from typing import Dict
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_ENDPOINTS = ("register", "login", "services", "install")


class ServiceDescriptor(BaseModel):
    """Identity of this node service, sent to the orchestrator on registration."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique service name, e.g. skeleton.herp.app")
    title: str = Field(..., description="Human-readable service title")
    description: str = Field(default="", description="Service description")
    version: str = Field(default="1.0.0", description="Service version")
    host: str = Field(..., description="host:port the orchestrator can reach us on")

    def to_register_payload(self) -> dict:
        """Body of the orchestrator register call."""
        return {
            "name": self.name,
            "host": self.host,
            "title": self.title,
            "version": self.version,
            "description": self.description,
        }


class OrchestratorEndpoint(BaseModel):
    """REST surface of the orchestrator for this deployment."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., description="host:port or base URL of the orchestrator")
    endpoints: Dict[str, str] = Field(
        default_factory=lambda: {
            "register": "/services/register",
            "login": "/users/login",
            "install": "/services/install",
            "services": "/content/system/service",
        }
    )

    @field_validator("endpoints")
    @classmethod
    def endpoints_complete(cls, v: Dict[str, str]) -> Dict[str, str]:
        missing = [name for name in REQUIRED_ENDPOINTS if not v.get(name)]
        if missing:
            raise ValueError(f"missing orchestrator endpoint(s): {', '.join(missing)}")
        return v

    @property
    def base_url(self) -> str:
        if self.host.startswith(("http://", "https://")):
            return self.host.rstrip("/")
        return f"http://{self.host}"

    def url_for(self, endpoint: str, *segments: str) -> str:
        """Build the URL of a named endpoint, optionally joined with escaped path segments."""
        url = self.base_url + self.endpoints[endpoint]
        for segment in segments:
            url = f"{url.rstrip('/')}/{quote(segment, safe='')}"
        return url


class ServiceRecord(BaseModel):
    """One entry of the orchestrator's service listing."""

    id: str = Field(..., alias="_id")
    name: str
    title: str


class InstallResult(BaseModel):
    """Successful install confirmation, wrapping the orchestrator's reply string."""

    message: str
