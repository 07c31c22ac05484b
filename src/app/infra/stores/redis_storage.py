"""Redis Key-Value Store: storage compartilhado via Redis.

Usado quando várias instâncias do cliente (ex: kiosks da mesma loja)
precisam enxergar o mesmo storage de origem. Erros do redis-py viram
StorageUnavailableError para que o fallback seguro dos stores funcione.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from app.protocols.key_value_store import KeyValueStoreProtocol
from utils.errors import StorageUnavailableError

if TYPE_CHECKING:
    from redis import Redis

logger = logging.getLogger(__name__)

# Prefixo padrão para namespace das chaves
STORAGE_PREFIX = "digimenu:"


class RedisKeyValueStore(KeyValueStoreProtocol):
    """Storage chave-valor usando Redis.

    Args:
        redis_client: Cliente Redis síncrono
        key_prefix: Namespace das chaves
    """

    def __init__(self, redis_client: Redis, key_prefix: str = STORAGE_PREFIX) -> None:
        self._redis = redis_client
        self._prefix = key_prefix

    def _key(self, key: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{self._prefix}{key}"

    def get_item(self, key: str) -> str | None:
        """Lê valor do Redis."""
        try:
            data = self._redis.get(self._key(key))
        except RedisError as exc:
            logger.warning("redis_storage_read_failed", extra={"key": key, "error": type(exc).__name__})
            raise StorageUnavailableError("redis_read_failed") from exc
        if data is None:
            return None
        if isinstance(data, bytes):
            return data.decode("utf-8")
        return str(data)

    def set_item(self, key: str, value: str) -> None:
        """Grava valor no Redis (sem TTL; expiração é lógica, feita na leitura)."""
        try:
            self._redis.set(self._key(key), value)
        except RedisError as exc:
            logger.warning("redis_storage_write_failed", extra={"key": key, "error": type(exc).__name__})
            raise StorageUnavailableError("redis_write_failed") from exc

    def remove_item(self, key: str) -> None:
        """Remove chave do Redis."""
        try:
            self._redis.delete(self._key(key))
        except RedisError as exc:
            logger.warning("redis_storage_delete_failed", extra={"key": key, "error": type(exc).__name__})
            raise StorageUnavailableError("redis_delete_failed") from exc

    def keys(self) -> list[str]:
        """Lista chaves do namespace (SCAN, sem bloquear o servidor)."""
        try:
            raw_keys = list(self._redis.scan_iter(match=f"{self._prefix}*"))
        except RedisError as exc:
            logger.warning("redis_storage_scan_failed", extra={"error": type(exc).__name__})
            raise StorageUnavailableError("redis_scan_failed") from exc
        result: list[str] = []
        for raw in raw_keys:
            name = raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)
            result.append(name[len(self._prefix):])
        return result
