"""Credential records passed explicitly into every remote operation.

Credentials are opaque to the core: they are handed in by the caller for a
single batch of requests and are never stored.
"""

from pydantic import Field, field_validator

from tickbooks.models.base import FrozenDataModel


class Credentials(FrozenDataModel):
    """Connection details for one remote service.

    Attributes:
        base_url: Tick account URL, or the FreshBooks API endpoint URL
        identity: Tick e-mail address, or the FreshBooks API token
        secret: Tick password; empty for FreshBooks (basic auth with an
            empty password)
    """

    base_url: str = Field(..., min_length=1, description="Service base URL")
    identity: str = Field(..., min_length=1, description="Login identity or token")
    secret: str = Field("", description="Password, empty when unused")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("base_url cannot be empty or whitespace")
        return v.rstrip("/")

    def __repr__(self) -> str:
        return f"Credentials(base_url={self.base_url!r}, identity={self.identity!r})"

    __str__ = __repr__


class CredentialSet(FrozenDataModel):
    """The Tick and FreshBooks credentials needed by a workflow operation."""

    time_tracking: Credentials
    invoicing: Credentials
