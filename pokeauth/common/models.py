"""
Pydantic models for request/response validation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoginContext(BaseModel):
    lt: str
    execution: str


class PtcErrorPayload(BaseModel):
    error: str | None = None
    errors: list[str] = Field(default_factory=list)

    def message(self) -> str | None:
        """Human readable failure message, or None when the payload carries none."""
        if self.error:
            return self.error
        if self.errors:
            return ", ".join(f'"{error}"' for error in self.errors)
        return None


class JWT(BaseModel):
    model_config = ConfigDict(frozen=True)

    contents: str
    unknown2: int = 59


class AuthInfo(BaseModel):
    """Credential fragment attached to every outgoing API request."""

    model_config = ConfigDict(frozen=True)

    provider: str
    token: JWT


class HashRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    latitude64: int
    longitude64: int
    accuracy64: int
    timestamp: int
    auth_ticket: str = Field(alias="authTicket")
    session_data: str = Field(alias="sessionData")
    requests: list[str]


class HashResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location_auth_hash: int = Field(alias="locationAuthHash")
    location_hash: int = Field(alias="locationHash")
    request_hashes: list[int] = Field(default_factory=list, alias="requestHashes")


class Hash(BaseModel):
    """Signing service output ready for the request envelope."""

    model_config = ConfigDict(frozen=True)

    location_auth_hash: int
    location_hash: int
    request_hashes: list[int]


class ClientConfig(BaseModel):
    username: str | None = None
    password: str | None = None
    hash_key: str | None = None
    hash_endpoint: str | None = None
    hash_profile: str | None = None
    await_quota: bool | None = None
    # None uses the configured default; a negative value means unbounded
    max_limit_retries: int | None = None
    max_login_attempts: int | None = None
    should_retry: bool | None = None
    http_timeout: float | None = None
    log_level: int | None = None
