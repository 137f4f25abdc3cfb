"""Local key-value store for the user's API key, persisted as a small YAML file."""

import os
from pathlib import Path

import yaml

API_KEY_STORAGE_KEY = "gemini_api_key"


class CredentialStore:
    """
    get/set/delete over a YAML mapping at `path`.

    The file is rewritten on every change and created with owner-only permissions.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        with open(self._path) as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            yaml.safe_dump(data, f)
        # O_CREAT's mode only applies to new files; tighten pre-existing ones too.
        os.chmod(self._path, 0o600)

    def get(self, key: str = API_KEY_STORAGE_KEY) -> str | None:
        value = self._read().get(key)
        return str(value) if value else None

    def set(self, value: str, key: str = API_KEY_STORAGE_KEY) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str = API_KEY_STORAGE_KEY) -> bool:
        """Remove key; return True if it was present."""
        data = self._read()
        if key not in data:
            return False
        del data[key]
        self._write(data)
        return True


def mask_secret(value: str, visible: int = 4) -> str:
    """Show only the last `visible` characters of a secret."""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
