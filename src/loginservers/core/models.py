"""Data models for login servers and the built-in server catalog."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LoginServer(BaseModel):
    """A named authentication endpoint."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name")
    url: str = Field(..., description="Absolute endpoint URL")
    is_custom: bool = Field(default=False, description="True for user-added servers")

    def as_pair(self) -> tuple[str, str]:
        return self.name, self.url

    def __str__(self) -> str:
        return f"{self.name} ({self.url})"


class ServerCatalog(BaseModel):
    """The fixed table of built-in servers shipped with the application."""

    servers: list[LoginServer] = Field(..., description="Built-ins in display order")
    sandbox_url: str = Field(..., description="URL of the built-in sandbox entry")

    @model_validator(mode="after")
    def _check_servers(self) -> "ServerCatalog":
        if not self.servers:
            raise ValueError("catalog must contain at least one login server")
        custom = [s.name for s in self.servers if s.is_custom]
        if custom:
            raise ValueError(f"built-in servers cannot be custom: {custom}")
        if all(s.url != self.sandbox_url for s in self.servers):
            raise ValueError(f"sandbox url {self.sandbox_url!r} is not in the catalog")
        return self

    @property
    def default(self) -> LoginServer:
        return self.servers[0]

    @property
    def sandbox(self) -> LoginServer:
        return next(s for s in self.servers if s.url == self.sandbox_url)
