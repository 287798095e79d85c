"""Key-value storage for table snapshots, backed by Redis when reachable."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import redis


logger = logging.getLogger(__name__)

SNAPSHOT_KEY_PREFIX = "table_state"


def _to_bytes(value: Any) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    return str(value).encode("utf-8")


def snapshot_key(table_id: str) -> str:
    return ":".join([SNAPSHOT_KEY_PREFIX, str(table_id)])


class InMemoryKV:
    """Minimal Redis-like key value store used when Redis is unavailable."""

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}

    def get(self, key: str):  # pragma: no cover - trivial wrapper
        return _to_bytes(self._values.get(key))

    # TTLs are ignored in memory; entries live as long as the process.
    def set(self, key: str, value: Any, **kwargs: Any):
        self._values[key] = value
        return True

    def exists(self, key: str):  # pragma: no cover - trivial wrapper
        return int(key in self._values)

    def delete(self, key: str):
        if key in self._values:
            del self._values[key]
            return 1
        return 0


class RedisKVStore:
    """Redis wrapper that drops to an in-memory store after a Redis error."""

    def __init__(self, backend: Optional[redis.Redis] = None) -> None:
        self._backend = backend
        self._fallback = InMemoryKV()

    @classmethod
    def from_config(cls, cfg) -> "RedisKVStore":
        """Build a store for ``cfg``; memory only unless Redis is enabled."""
        if not cfg.USE_REDIS:
            return cls()
        backend = redis.Redis(
            host=cfg.REDIS_HOST,
            port=cfg.REDIS_PORT,
            db=cfg.REDIS_DB,
            password=cfg.REDIS_PASS or None,
        )
        return cls(backend)

    def _call(self, method: str, *args: Any, **kwargs: Any):
        if self._backend is not None:
            func = getattr(self._backend, method, None)
            if func is not None:
                try:
                    return func(*args, **kwargs)
                except redis.exceptions.RedisError as exc:
                    logger.warning(
                        "Redis %s failed, switching to memory store: %s",
                        method,
                        exc,
                    )
                    self._backend = None
        fallback_func = getattr(self._fallback, method)
        return fallback_func(*args, **kwargs)

    def get(
        self,
        key: str,
    ):  # pragma: no cover - trivial wrapper
        return self._call("get", key)

    # pragma: no cover - trivial wrapper
    def set(
        self,
        key: str,
        value: Any,
        **kwargs: Any,
    ):
        return self._call("set", key, value, **kwargs)

    def exists(
        self,
        key: str,
    ):
        return self._call("exists", key)

    # pragma: no cover - trivial wrapper
    def delete(
        self,
        key: str,
    ):
        return self._call("delete", key)

    # ------------------------------------------------------------------
    # Table snapshot helpers
    # ------------------------------------------------------------------

    def save_table_snapshot(
        self,
        table_id: str,
        payload: Dict[str, Any],
        ttl_seconds: Optional[int] = None,
    ) -> bool:
        """Store ``payload`` as JSON under the table's snapshot key."""

        key = snapshot_key(table_id)
        try:
            self.set(key, json.dumps(payload), ex=ttl_seconds)
        except (TypeError, ValueError) as exc:
            logger.error(
                "Failed to serialise snapshot for table %s: %s",
                table_id,
                exc,
            )
            return False
        logger.debug("Stored snapshot: table=%s, key=%s", table_id, key)
        return True

    def load_table_snapshot(self, table_id: str) -> Optional[Dict[str, Any]]:
        """Return the last stored snapshot for ``table_id`` if present."""

        raw = self.get(snapshot_key(table_id))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.error(
                "Stored snapshot for table %s is not valid JSON: %s",
                table_id,
                exc,
            )
            return None


_ADAPTER_ATTRIBUTE = "_pokertable_resilient"
_ADAPTERS: Dict[int, RedisKVStore] = {}


def ensure_kv(kv: Optional[Any]) -> RedisKVStore:
    if isinstance(kv, RedisKVStore):
        return kv
    if kv is None:
        return RedisKVStore()

    adapter = getattr(kv, _ADAPTER_ATTRIBUTE, None)
    if isinstance(adapter, RedisKVStore):
        return adapter

    key = id(kv)
    if key in _ADAPTERS:
        return _ADAPTERS[key]

    adapter = RedisKVStore(kv)
    try:
        setattr(kv, _ADAPTER_ATTRIBUTE, adapter)
    except AttributeError:  # pragma: no cover - slotted backends
        _ADAPTERS[key] = adapter
    return adapter
