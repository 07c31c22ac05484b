"""Factories de infraestrutura baseadas em configuração de ambiente."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.bootstrap.clients import create_redis_client
from app.infra.stores import MemoryKeyValueStore, RedisKeyValueStore

if TYPE_CHECKING:
    from app.protocols.key_value_store import KeyValueStoreProtocol
    from config.settings import BaseSettings, StorageSettings

logger = logging.getLogger(__name__)


def create_storage_backend(
    storage: StorageSettings,
    base: BaseSettings,
) -> KeyValueStoreProtocol:
    """Cria o backend do storage da origem.

    Raises:
        ValueError: Backend desconhecido ou Redis sem URL
    """
    if storage.backend == "redis":
        backend = RedisKeyValueStore(
            create_redis_client(storage.redis_url),
            key_prefix=storage.key_prefix,
        )
        logger.info("storage_backend_created", extra={"backend": "redis"})
        return backend

    if storage.backend == "memory":
        if not base.is_development:
            logger.warning(
                "memory_store_in_non_dev",
                extra={"backend": "memory", "environment": base.environment},
            )
        logger.info("storage_backend_created", extra={"backend": "memory"})
        return MemoryKeyValueStore()

    msg = f"STORAGE_BACKEND inválido: {storage.backend}"
    raise ValueError(msg)
