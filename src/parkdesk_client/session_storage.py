from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Protocol

from platformdirs import user_data_dir

from .exceptions import StorageError
from .logger import get_logger, log_action

TOKEN_KEY = "token"
USER_KEY = "user"
ROLE_KEY = "role"
STAFF_PERMISSION_KEY = "staffPermission"
PRICES_KEY = "prices"

SESSION_KEYS = (USER_KEY, TOKEN_KEY, PRICES_KEY, ROLE_KEY, STAFF_PERMISSION_KEY)

logger = get_logger("parkdesk_client.session_storage")


class SessionStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def multi_remove(self, keys: Iterable[str]) -> None: ...

    def clear(self) -> None: ...


@dataclass
class MemorySessionStorage:
    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.items.pop(key, None)

    def clear(self) -> None:
        self.items.clear()


@dataclass
class FileSessionStorage:
    """Key-value storage kept in one JSON document in the user data directory."""

    app_name: str = "parkdesk"
    filename: str = "session.json"
    directory: Path | None = None

    def _path(self) -> Path:
        base = self.directory or Path(user_data_dir(self.app_name, "Parkdesk"))
        base.mkdir(parents=True, exist_ok=True)
        return base / self.filename

    def _load(self) -> dict[str, str]:
        path = self._path()
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            path.unlink()
            return {}
        if not isinstance(data, dict):
            path.unlink()
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _save(self, items: dict[str, str]) -> None:
        path = self._path()
        path.write_text(json.dumps(items, indent=2), encoding="utf-8")
        try:
            path.chmod(0o600)
        except OSError:
            pass

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        self.multi_remove([key])

    def multi_remove(self, keys: Iterable[str]) -> None:
        items = self._load()
        for key in keys:
            items.pop(key, None)
        self._save(items)

    def clear(self) -> None:
        path = self._path()
        if path.exists():
            path.unlink()


class SessionStore:
    """Best-effort facade: storage failures are logged and never raised to callers."""

    def __init__(self, backend: SessionStorage) -> None:
        self.backend = backend

    def write(self, key: str, value: str) -> bool:
        try:
            self._guard("write", key, lambda: self.backend.set_item(key, value))
        except StorageError:
            return False
        return True

    def read(self, key: str) -> str | None:
        try:
            return self._guard("read", key, lambda: self.backend.get_item(key))
        except StorageError:
            return None

    def write_json(self, key: str, value: Any) -> bool:
        return self.write(key, json.dumps(value))

    def read_json(self, key: str) -> Any:
        raw = self.read(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            log_action(logger, "session_storage", "read", None, "corrupt_value", logging.WARNING, key=key)
            return None

    def clear(self) -> bool:
        cleared = True
        steps = (
            (",".join(SESSION_KEYS), lambda: self.backend.multi_remove(SESSION_KEYS)),
            ("*", self.backend.clear),
        )
        for key, operation in steps:
            try:
                self._guard("clear", key, operation)
            except StorageError:
                cleared = False
        return cleared

    @staticmethod
    def _guard(action: str, key: str, operation):
        try:
            return operation()
        except (OSError, ValueError, TypeError) as exc:
            log_action(
                logger,
                "session_storage",
                action,
                None,
                "error",
                logging.WARNING,
                key=key,
                error=type(exc).__name__,
            )
            raise StorageError(f"Session storage {action} failed for {key}") from exc
