"""Credentials delivered by the orchestrator's install callback."""

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from node_service.constants import DEFAULT_CREDENTIALS_NAME, DEFAULT_CREDENTIALS_PASSWORD


class Credentials(BaseModel):
    """Name/password pair used to log in to the orchestrator."""

    model_config = ConfigDict(frozen=True)

    name: StrictStr = Field(..., description="Orchestrator account (e-mail)")
    password: StrictStr = Field(..., repr=False)

    @classmethod
    def default(cls) -> "Credentials":
        """Placeholder pair used until the install callback stores a real one."""
        return cls(name=DEFAULT_CREDENTIALS_NAME, password=DEFAULT_CREDENTIALS_PASSWORD)

    def to_login_payload(self) -> dict:
        return {"email": self.name, "password": self.password}
