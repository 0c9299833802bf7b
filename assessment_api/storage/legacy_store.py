"""Legacy local key-value store, read once and deleted after migration."""
import logging
import time
from pathlib import Path
from typing import Any, Protocol

from assessment_api.utils.json_utils import read_json_file, write_json_file

logger = logging.getLogger(__name__)

STORAGE_ENVELOPE_VERSION = 1


class LegacyKeyValueStore(Protocol):
    def read(self, key: str, default: Any) -> Any: ...

    def remove(self, key: str) -> None: ...


def _unwrap_envelope(payload: Any) -> tuple[bool, Any, float | None]:
    """Return (is_envelope, data, expires_at_ms)."""
    if (
        isinstance(payload, dict)
        and payload.get("__storageVersion") == STORAGE_ENVELOPE_VERSION
        and "data" in payload
    ):
        expires_at = payload.get("expiresAt")
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            expires_at = None
        return True, payload["data"], expires_at
    return False, payload, None


class JsonFileKeyValueStore:
    """One JSON file per key under a directory."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def _key_path(self, key: str) -> Path:
        if Path(key).name != key:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.base_dir / f"{key}.json"

    def read(self, key: str, default: Any) -> Any:
        path = self._key_path(key)
        payload = read_json_file(path, None)
        if payload is None:
            return default
        is_envelope, data, expires_at = _unwrap_envelope(payload)
        if is_envelope and expires_at is not None and expires_at <= time.time() * 1000:
            self.remove(key)
            return default
        return data

    def write(self, key: str, value: Any, ttl_ms: int | None = None) -> None:
        now_ms = time.time() * 1000
        envelope: dict[str, Any] = {
            "__storageVersion": STORAGE_ENVELOPE_VERSION,
            "data": value,
            "updatedAt": int(now_ms),
        }
        if ttl_ms is not None:
            envelope["expiresAt"] = int(now_ms + ttl_ms)
        write_json_file(self._key_path(key), envelope)

    def remove(self, key: str) -> None:
        path = self._key_path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.warning("Failed to remove legacy key %s: %s", key, exc)
