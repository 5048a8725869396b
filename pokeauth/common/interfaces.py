"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

from pokeauth.common.models import AuthInfo, Hash


class Clock(Protocol):
    """Protocol for time sources."""

    def current_time_millis(self) -> int: ...


class CredentialProvider(Protocol):
    """Protocol for session credential providers."""

    def get_token_id(self, refresh: bool = False) -> str: ...  # noqa: FBT001, FBT002

    def get_auth_info(self, refresh: bool = False) -> AuthInfo: ...  # noqa: FBT001, FBT002

    def is_token_id_expired(self) -> bool: ...

    def reset(self) -> None: ...


class HashProvider(Protocol):
    """Protocol for request signing providers."""

    @property
    def hash_version(self) -> int: ...

    @property
    def unk25(self) -> int: ...

    def provide(
        self,
        timestamp: int,
        latitude: float,
        longitude: float,
        altitude: float,
        auth_ticket: bytes,
        session_data: bytes,
        requests: Sequence[bytes],
    ) -> Hash: ...


class HashApiListener(Protocol):
    """Protocol for observers of hashing service calls.

    ``headers`` are the response headers, or None when no response arrived.
    """

    def hash_success(
        self, elapsed_ms: int, status_code: int, headers: Mapping[str, str]
    ) -> None: ...

    def hash_failed(
        self,
        elapsed_ms: int,
        status_code: int | None,
        reason: str,
        headers: Mapping[str, str] | None,
    ) -> None: ...
