"""
Hash provider backed by the PokeHash signing service.

This requires a paid key; every key has its own request quota, tracked in
a RateLimitState that may be shared by several providers and threads.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

import requests
from pydantic import ValidationError

from pokeauth.common.clock import SystemClock
from pokeauth.common.config import Config
from pokeauth.common.exceptions import (
    HashError,
    HashLimitExceededError,
    HashUnauthorizedError,
)
from pokeauth.common.models import Hash, HashRequest, HashResponse
from pokeauth.hashing.encoding import double_to_long_bits, encode_bytes, fold_hash
from pokeauth.hashing.profiles import DEFAULT_PROFILE, HashVersionProfile
from pokeauth.hashing.rate_limit import QuotaPolicy, RateLimitState

if TYPE_CHECKING:
    from pokeauth.common.interfaces import Clock, HashApiListener

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_NOT_FOUND = 404
HTTP_TOO_MANY_REQUESTS = 429

DEFAULT_MAX_LIMIT_RETRIES = 5

logger = logging.getLogger(__name__)


def build_hash_request(
    timestamp: int,
    latitude: float,
    longitude: float,
    altitude: float,
    auth_ticket: bytes,
    session_data: bytes,
    requests: Sequence[bytes],
) -> HashRequest:
    """Encode signing inputs the way the service expects them on the wire."""
    return HashRequest(
        latitude64=double_to_long_bits(latitude),
        longitude64=double_to_long_bits(longitude),
        accuracy64=double_to_long_bits(altitude),
        timestamp=timestamp,
        auth_ticket=encode_bytes(auth_ticket),
        session_data=encode_bytes(session_data),
        requests=[encode_bytes(request) for request in requests],
    )


class PokeHashProvider:
    """HashProvider talking to one PokeHash endpoint with one key."""

    def __init__(
        self,
        key: str,
        profile: HashVersionProfile = DEFAULT_PROFILE,
        endpoint: str | None = None,
        listener: HashApiListener | None = None,
        rate_limit: RateLimitState | None = None,
        await_quota: bool = False,  # noqa: FBT001, FBT002
        quota_policy: QuotaPolicy = QuotaPolicy.STRICT,
        max_limit_retries: int | None = DEFAULT_MAX_LIMIT_RETRIES,
        clock: Clock | None = None,
        session: requests.Session | None = None,
        config: Config | None = None,
        timeout: float | None = None,
    ):
        if not key:
            msg = "Key cannot be empty!"
            raise ValueError(msg)

        self.config = config or Config()
        self.key = key
        self.profile = profile.with_endpoint(endpoint) if endpoint else profile
        self.listener = listener
        self.clock = clock or SystemClock()
        self.rate_limit = rate_limit or RateLimitState(self.clock)
        self.await_quota = await_quota
        self.quota_policy = quota_policy
        # None retries a 429 for as long as the service keeps answering it
        self.max_limit_retries = max_limit_retries
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else self.config.HTTP_TIMEOUT

    @property
    def endpoint(self) -> str:
        return self.profile.endpoint

    @property
    def hash_version(self) -> int:
        return self.profile.version

    @property
    def unk25(self) -> int:
        return self.profile.unk25

    def provide(
        self,
        timestamp: int,
        latitude: float,
        longitude: float,
        altitude: float,
        auth_ticket: bytes,
        session_data: bytes,
        requests: Sequence[bytes],
    ) -> Hash:
        """Sign one outgoing request.

        Args:
            timestamp: Request timestamp in milliseconds
            latitude: Reported latitude
            longitude: Reported longitude
            altitude: Reported altitude, sent as the accuracy field
            auth_ticket: Serialized auth ticket
            session_data: Per-session random bytes
            requests: Serialized request messages, in envelope order

        Raises:
            HashUnauthorizedError: the key was rejected
            HashLimitExceededError: the key's quota is exhausted
            HashError: any other failure
        """
        request = build_hash_request(
            timestamp, latitude, longitude, altitude, auth_ticket, session_data, requests
        )
        started = time.perf_counter()
        try:
            self._check_quota()
            response, result = self._exchange(request)
        except HashError as e:
            self._notify_failed(started, e.status_code, str(e), e.headers)
            raise
        self._notify_success(started, response.status_code, response.headers)
        return result

    def _check_quota(self) -> None:
        if not self.rate_limit.observed:
            return
        if self.await_quota:
            if self.rate_limit.is_exhausted():
                logger.info("Hash quota exhausted, waiting for the rate period to end")
                self.rate_limit.await_reset()
            return

        delay = self.rate_limit.refusal_delay(self.quota_policy)
        if delay is not None:
            msg = f"Exceeded hash limit, try again in {delay:.0f}s"
            raise HashLimitExceededError(msg, status_code=None, retry_after=delay)

    def _exchange(self, request: HashRequest) -> tuple[requests.Response, Hash]:
        limit_retries = 0
        while True:
            response = self._post(request)
            self.rate_limit.update_from_headers(response.headers)

            if response.status_code == HTTP_TOO_MANY_REQUESTS and self.await_quota:
                if (
                    self.max_limit_retries is not None
                    and limit_retries >= self.max_limit_retries
                ):
                    msg = f"Exceeded hash limit after {limit_retries} retries"
                    raise HashLimitExceededError(msg, headers=response.headers)
                limit_retries += 1
                logger.info(
                    "Hash limit reached, retry %d after the rate period ends",
                    limit_retries,
                )
                # A refusal without a future period end still waits before re-sending
                self.rate_limit.await_reset(self.rate_limit.fallback_wait_seconds())
                continue

            return response, self._handle_response(response)

    def _post(self, request: HashRequest) -> requests.Response:
        try:
            return self.session.post(
                self.endpoint,
                data=request.model_dump_json(by_alias=True),
                headers={
                    "X-AuthToken": self.key,
                    "Content-Type": "application/json",
                    "User-Agent": self.config.HASH_USER_AGENT,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            msg = f"Failed to perform PokeHash request: {e}"
            raise HashError(msg) from e

    def _handle_response(self, response: requests.Response) -> Hash:
        status = response.status_code
        headers = response.headers
        if status == HTTP_OK:
            try:
                body = HashResponse.model_validate_json(response.content)
            except ValidationError as e:
                msg = "Malformed hash response"
                raise HashError(msg, status, headers) from e
            return Hash(
                location_auth_hash=fold_hash(body.location_auth_hash),
                location_hash=fold_hash(body.location_hash),
                request_hashes=body.request_hashes,
            )

        error = response.text.strip()
        if status == HTTP_BAD_REQUEST:
            raise HashError(error or "Bad hash request!", status, headers)
        if status == HTTP_UNAUTHORIZED:
            raise HashUnauthorizedError(error or "Unauthorized hash request!", headers)
        if status == HTTP_TOO_MANY_REQUESTS:
            raise HashLimitExceededError(
                error or "Exceeded hash limit!",
                retry_after=self.rate_limit.seconds_until_reset(),
                headers=headers,
            )
        if status == HTTP_NOT_FOUND:
            msg = f"Hash endpoint not found: {self.endpoint}"
            raise HashError(msg, status, headers)
        msg = f"{error or 'Received unknown response code!'} ({status})"
        raise HashError(msg, status, headers)

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)

    def _notify_success(
        self, started: float, status_code: int, headers: Mapping[str, str]
    ) -> None:
        if self.listener is None:
            return
        try:
            self.listener.hash_success(self._elapsed_ms(started), status_code, headers)
        except Exception:
            logger.exception("Hash listener failed on success notification")

    def _notify_failed(
        self,
        started: float,
        status_code: int | None,
        reason: str,
        headers: Mapping[str, str] | None,
    ) -> None:
        if self.listener is None:
            return
        try:
            self.listener.hash_failed(
                self._elapsed_ms(started), status_code, reason, headers
            )
        except Exception:
            logger.exception("Hash listener failed on failure notification")
