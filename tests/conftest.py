from __future__ import annotations

import base64
import json
import time
from collections.abc import Callable

import pytest

from parkdesk_client.config import ClientConfig
from parkdesk_client.http_client import HttpClient
from parkdesk_client.session_storage import MemorySessionStorage, SessionStore
from parkdesk_client.store import ParkingStore

BASE_URL = "https://api.example.com"


def _segment(data: dict) -> str:
    raw = base64.urlsafe_b64encode(json.dumps(data).encode("utf-8")).decode("ascii")
    return raw.rstrip("=")


@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make(exp: float | None = None, **claims) -> str:
        payload = dict(claims)
        if exp is not None:
            payload["exp"] = exp
        return ".".join([_segment({"alg": "HS256", "typ": "JWT"}), _segment(payload), "signature"])

    return _make


@pytest.fixture
def valid_token(make_token) -> str:
    return make_token(exp=int(time.time()) + 3600, id="user-1")


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(env_name="test", api_base_url=BASE_URL)


@pytest.fixture
def http(config: ClientConfig) -> HttpClient:
    return HttpClient(config)


@pytest.fixture
def backend() -> MemorySessionStorage:
    return MemorySessionStorage()


@pytest.fixture
def store(http: HttpClient, backend: MemorySessionStorage) -> ParkingStore:
    return ParkingStore(http=http, session=SessionStore(backend))
