from __future__ import annotations

import json
from typing import Any

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from pokeauth.common.clock import FixedClock

# 2017-07-01T00:00:00Z
NOW_MS = 1_498_867_200_000


def build_response(
    status_code: int,
    body: Any = b"",
    headers: dict[str, str] | None = None,
    url: str = "https://example.invalid/",
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    if isinstance(body, bytes):
        response._content = body
    elif isinstance(body, str):
        response._content = body.encode()
    else:
        response._content = json.dumps(body).encode()
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = "utf-8"
    response.url = url
    return response


class RecordingSession(requests.Session):
    """requests.Session replaying queued responses and recording every call."""

    def __init__(self, outcomes: list[requests.Response | Exception] | None = None):
        super().__init__()
        self.outcomes = list(outcomes or [])
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # type: ignore[override]
        self.calls.append(
            {"method": method, "url": url, "headers": dict(self.headers), **kwargs}
        )
        if not self.outcomes:
            msg = f"Unexpected {method} {url}"
            raise AssertionError(msg)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True
        super().close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW_MS)

