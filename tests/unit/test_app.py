from __future__ import annotations

from pathlib import Path

from parkdesk_client import create_store
from parkdesk_client.config import ClientConfig
from parkdesk_client.session_storage import FileSessionStorage, MemorySessionStorage
from parkdesk_client.state import AuthStatus


def test_create_store_wires_components(config: ClientConfig) -> None:
    backend = MemorySessionStorage()

    store = create_store(config=config, storage=backend)

    assert store.session.backend is backend
    assert store.http.config is config
    assert store.auth.store is store
    assert store.gate.state is store.state
    assert store.state.status is AuthStatus.UNINITIALIZED


def test_create_store_defaults_to_file_storage(config: ClientConfig) -> None:
    store = create_store(config=config)

    assert isinstance(store.session.backend, FileSessionStorage)
    assert store.session.backend.app_name == config.app_name


def test_restore_with_file_storage_and_nothing_saved(config: ClientConfig, tmp_path: Path) -> None:
    store = create_store(config=config, storage=FileSessionStorage(directory=tmp_path))

    store.auth.restore_session()

    assert store.state.hydrated is True
    assert store.state.status is AuthStatus.UNAUTHENTICATED


def test_create_store_honours_session_dir(tmp_path: Path) -> None:
    config = ClientConfig(env_name="test", api_base_url="https://api.example.com", session_dir=tmp_path)
    store = create_store(config=config)

    assert store.session.write("role", "admin") is True
    assert (tmp_path / "session.json").exists()
