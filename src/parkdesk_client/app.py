from __future__ import annotations

from collections.abc import Callable

from .config import ClientConfig, load_config
from .http_client import HttpClient
from .session_storage import FileSessionStorage, SessionStorage, SessionStore
from .store import ParkingStore


def create_store(
    config: ClientConfig | None = None,
    storage: SessionStorage | None = None,
    http: HttpClient | None = None,
    on_session_invalid: Callable[[str], None] | None = None,
) -> ParkingStore:
    config = config or load_config()
    http = http or HttpClient(config)
    backend = storage
    if backend is None:
        backend = FileSessionStorage(app_name=config.app_name, directory=config.session_dir)
    return ParkingStore(http=http, session=SessionStore(backend), on_session_invalid=on_session_invalid)
