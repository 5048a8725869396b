from __future__ import annotations

import json
import time
from unittest.mock import Mock

import pytest
import requests

from pokeauth.common.clock import FixedClock, SystemClock
from pokeauth.common.exceptions import (
    HashError,
    HashLimitExceededError,
    HashUnauthorizedError,
)
from pokeauth.hashing.encoding import decode_bytes, double_to_long_bits
from pokeauth.hashing.pokehash import PokeHashProvider
from pokeauth.hashing.profiles import POKEHASH_0_51, HashVersionProfile
from pokeauth.hashing.rate_limit import (
    DEFAULT_FALLBACK_WAIT_SECONDS,
    QuotaPolicy,
    RateLimitState,
)

from conftest import NOW_MS, RecordingSession, build_response

NOW_S = NOW_MS // 1000
HASH_BODY = {
    "locationAuthHash": 0x0000000100000002,
    "locationHash": 0x00000000FFFFFFFF,
    "requestHashes": [1234567890123, -42],
}
SIGN_ARGS = (NOW_MS, 40.0, -74.0, 10.0, b"ticket", b"session", [b"req-1", b"req-2"])


def quota_headers(remaining: int = 100, period_end: int = NOW_S + 30) -> dict[str, str]:
    return {
        "X-MaxRequestCount": "150",
        "X-RatePeriodEnd": str(period_end),
        "X-RateRequestsRemaining": str(remaining),
        "X-RateLimitSeconds": "60",
        "X-AuthTokenExpiration": str(NOW_S + 86400),
    }


def ok_response() -> requests.Response:
    return build_response(200, HASH_BODY, quota_headers())


@pytest.fixture
def listener() -> Mock:
    return Mock()


def make_provider(outcomes, clock=None, **kwargs) -> tuple[PokeHashProvider, RecordingSession]:
    session = RecordingSession(outcomes)
    clock = clock or FixedClock(NOW_MS)
    provider = PokeHashProvider("secret-key", clock=clock, session=session, **kwargs)
    return provider, session


def test_key_is_required() -> None:
    with pytest.raises(ValueError, match="Key cannot be empty"):
        PokeHashProvider("")


def test_version_metadata_comes_from_profile() -> None:
    provider, _ = make_provider([])
    assert provider.hash_version == 5100
    assert provider.unk25 == -8832040574896607694
    assert provider.endpoint == "https://pokehash.buddyauth.com/api/v121_2/hash"


def test_custom_profile_and_endpoint_override() -> None:
    profile = HashVersionProfile("test", "https://hash.invalid/api/v1/hash", 4500, 7)
    provider, _ = make_provider([], profile=profile, endpoint="https://mirror.invalid/hash")
    assert provider.hash_version == 4500
    assert provider.unk25 == 7
    assert provider.endpoint == "https://mirror.invalid/hash"


def test_successful_hash(listener: Mock) -> None:
    provider, _ = make_provider([ok_response()], listener=listener)

    result = provider.provide(*SIGN_ARGS)

    assert result.location_auth_hash == 3
    assert result.location_hash == -1
    assert result.request_hashes == [1234567890123, -42]
    listener.hash_success.assert_called_once()
    elapsed_ms, status_code, headers = listener.hash_success.call_args.args
    assert elapsed_ms >= 0
    assert status_code == 200
    assert headers["X-RateRequestsRemaining"] == "100"
    listener.hash_failed.assert_not_called()


def test_request_encoding() -> None:
    provider, session = make_provider([ok_response()])

    provider.provide(*SIGN_ARGS)

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == POKEHASH_0_51.endpoint
    assert call["headers"]["X-AuthToken"] == "secret-key"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["headers"]["User-Agent"] == "pokeauth/0.1.0"

    body = json.loads(call["data"])
    assert set(body) == {
        "latitude64",
        "longitude64",
        "accuracy64",
        "timestamp",
        "authTicket",
        "sessionData",
        "requests",
    }
    assert body["latitude64"] == double_to_long_bits(40.0)
    assert body["longitude64"] == double_to_long_bits(-74.0)
    assert body["accuracy64"] == double_to_long_bits(10.0)
    assert body["timestamp"] == NOW_MS
    assert decode_bytes(body["authTicket"]) == b"ticket"
    assert decode_bytes(body["sessionData"]) == b"session"
    assert [decode_bytes(r) for r in body["requests"]] == [b"req-1", b"req-2"]


def test_success_updates_shared_quota() -> None:
    provider, _ = make_provider([ok_response()])

    provider.provide(*SIGN_ARGS)

    snapshot = provider.rate_limit.snapshot()
    assert snapshot.observed
    assert snapshot.requests_remaining == 100
    assert snapshot.period_end == NOW_S + 30


@pytest.mark.parametrize(
    ("status", "body", "error_type", "message"),
    [
        (400, "", HashError, "Bad hash request!"),
        (400, "Invalid latitude", HashError, "Invalid latitude"),
        (401, "", HashUnauthorizedError, "Unauthorized hash request!"),
        (401, "Key expired", HashUnauthorizedError, "Key expired"),
        (429, "", HashLimitExceededError, "Exceeded hash limit!"),
        (429, "Slow down", HashLimitExceededError, "Slow down"),
        (500, "", HashError, "Received unknown response code! (500)"),
        (503, "Maintenance", HashError, "Maintenance (503)"),
    ],
)
def test_status_mapping(status, body, error_type, message, listener: Mock) -> None:
    provider, _ = make_provider(
        [build_response(status, body, quota_headers(remaining=9))], listener=listener
    )

    with pytest.raises(error_type) as exc_info:
        provider.provide(*SIGN_ARGS)

    assert type(exc_info.value) is error_type
    assert str(exc_info.value) == message
    assert exc_info.value.status_code == status
    assert exc_info.value.headers["X-RateRequestsRemaining"] == "9"
    listener.hash_failed.assert_called_once()
    _, status_code, reason, headers = listener.hash_failed.call_args.args
    assert (status_code, reason) == (status, message)
    assert headers["X-RateRequestsRemaining"] == "9"
    listener.hash_success.assert_not_called()


def test_not_found_names_endpoint() -> None:
    provider, _ = make_provider([build_response(404, "Not Found")])

    with pytest.raises(HashError, match="api/v121_2/hash") as exc_info:
        provider.provide(*SIGN_ARGS)

    assert exc_info.value.status_code == 404


def test_unauthorized_response_still_updates_quota() -> None:
    provider, _ = make_provider([build_response(401, "", quota_headers(remaining=7))])

    with pytest.raises(HashUnauthorizedError):
        provider.provide(*SIGN_ARGS)

    assert provider.rate_limit.requests_remaining == 7
    assert provider.rate_limit.observed


def test_transport_failure(listener: Mock) -> None:
    provider, _ = make_provider([requests.ConnectionError("reset by peer")], listener=listener)

    with pytest.raises(HashError, match="Failed to perform PokeHash request") as exc_info:
        provider.provide(*SIGN_ARGS)

    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
    assert exc_info.value.status_code is None
    assert listener.hash_failed.call_args.args[1] is None
    assert listener.hash_failed.call_args.args[3] is None
    assert not provider.rate_limit.observed


def test_malformed_success_body() -> None:
    provider, _ = make_provider([build_response(200, {"unexpected": True})])

    with pytest.raises(HashError, match="Malformed hash response"):
        provider.provide(*SIGN_ARGS)


def test_local_quota_refusal_skips_network(listener: Mock) -> None:
    rate_limit = RateLimitState(FixedClock(NOW_MS))
    rate_limit.update_from_headers(quota_headers(remaining=0, period_end=NOW_S + 20))
    provider, session = make_provider([], rate_limit=rate_limit, listener=listener)

    with pytest.raises(HashLimitExceededError) as exc_info:
        provider.provide(*SIGN_ARGS)

    assert session.calls == []
    assert exc_info.value.retry_after == pytest.approx(20)
    listener.hash_failed.assert_called_once()
    assert listener.hash_failed.call_args.args[3] is None


def test_legacy_quota_policy_lets_current_period_through() -> None:
    rate_limit = RateLimitState(FixedClock(NOW_MS))
    rate_limit.update_from_headers(quota_headers(remaining=0, period_end=NOW_S + 20))
    provider, session = make_provider(
        [ok_response()], rate_limit=rate_limit, quota_policy=QuotaPolicy.LEGACY
    )

    provider.provide(*SIGN_ARGS)

    assert len(session.calls) == 1


def test_quota_is_shared_between_providers() -> None:
    clock = FixedClock(NOW_MS)
    rate_limit = RateLimitState(clock)
    first, _ = make_provider(
        [build_response(429, "", quota_headers(remaining=0))], clock=clock, rate_limit=rate_limit
    )
    second, second_session = make_provider([], clock=clock, rate_limit=rate_limit)

    with pytest.raises(HashLimitExceededError):
        first.provide(*SIGN_ARGS)
    with pytest.raises(HashLimitExceededError):
        second.provide(*SIGN_ARGS)

    assert second_session.calls == []


def test_blocking_mode_retries_after_limit(listener: Mock) -> None:
    fresh, _ = make_provider([ok_response()])
    expected = fresh.provide(*SIGN_ARGS)

    limited = build_response(429, "", quota_headers(remaining=0, period_end=NOW_S + 20))
    provider, session = make_provider(
        [limited, ok_response()], await_quota=True, listener=listener
    )
    provider.rate_limit.await_reset = Mock()  # type: ignore[method-assign]

    assert provider.provide(*SIGN_ARGS) == expected
    assert len(session.calls) == 2
    provider.rate_limit.await_reset.assert_called_once_with(60.0)
    assert session.calls[0]["data"] == session.calls[1]["data"]
    listener.hash_success.assert_called_once()
    listener.hash_failed.assert_not_called()


def test_blocking_mode_gives_up_after_retry_bound() -> None:
    limited = [
        build_response(429, "", quota_headers(remaining=0, period_end=NOW_S))
        for _ in range(3)
    ]
    provider, session = make_provider(limited, await_quota=True, max_limit_retries=2)
    provider.rate_limit.await_reset = Mock()  # type: ignore[method-assign]

    with pytest.raises(HashLimitExceededError, match="after 2 retries") as exc_info:
        provider.provide(*SIGN_ARGS)

    assert len(session.calls) == 3
    assert provider.rate_limit.await_reset.call_count == 2
    assert exc_info.value.headers["X-RateRequestsRemaining"] == "0"


def test_blocking_mode_waits_between_limits_without_quota_headers() -> None:
    outcomes = [build_response(429, "") for _ in range(50)] + [ok_response()]
    provider, session = make_provider(outcomes, await_quota=True, max_limit_retries=None)
    posts_before_wait: list[int] = []

    def record_wait(fallback_seconds=None) -> None:
        assert fallback_seconds == DEFAULT_FALLBACK_WAIT_SECONDS
        posts_before_wait.append(len(session.calls))

    provider.rate_limit.await_reset = Mock(side_effect=record_wait)  # type: ignore[method-assign]

    provider.provide(*SIGN_ARGS)

    assert len(session.calls) == 51
    assert posts_before_wait == list(range(1, 51))


def test_blocking_mode_waits_before_sending_when_exhausted() -> None:
    clock = FixedClock(NOW_MS)
    rate_limit = RateLimitState(clock)
    rate_limit.update_from_headers(quota_headers(remaining=0, period_end=NOW_S + 3600))
    rate_limit.await_reset = Mock()  # type: ignore[method-assign]
    provider, session = make_provider(
        [ok_response()], clock=clock, rate_limit=rate_limit, await_quota=True
    )

    provider.provide(*SIGN_ARGS)

    rate_limit.await_reset.assert_called_once()
    assert len(session.calls) == 1


def test_listener_errors_do_not_mask_results() -> None:
    listener = Mock()
    listener.hash_success.side_effect = RuntimeError("observer broke")
    listener.hash_failed.side_effect = RuntimeError("observer broke")

    provider, _ = make_provider([ok_response()], listener=listener)
    assert provider.provide(*SIGN_ARGS).location_auth_hash == 3

    provider, _ = make_provider([build_response(401, "")], listener=listener)
    with pytest.raises(HashUnauthorizedError):
        provider.provide(*SIGN_ARGS)


def test_limit_without_period_end_blocks_before_resending() -> None:
    limited = build_response(429, "", {"X-RateLimitSeconds": "1"})
    provider, session = make_provider(
        [limited, ok_response()], clock=SystemClock(), await_quota=True
    )

    started = time.monotonic()
    provider.provide(*SIGN_ARGS)

    assert len(session.calls) == 2
    assert time.monotonic() - started >= 0.9
