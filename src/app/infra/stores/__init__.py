"""Stores: implementações concretas do storage chave-valor.

Módulos disponíveis:
    - memory_stores: Storage em memória para desenvolvimento/testes
    - redis_storage: Storage compartilhado via Redis
    - origin_storage: Storage da origem com eventos entre abas
    - safe_io: Leitura/escrita JSON com fallback seguro
"""

from __future__ import annotations

from app.infra.stores.memory_stores import MemoryKeyValueStore
from app.infra.stores.origin_storage import OriginStorage, TabStorage
from app.infra.stores.redis_storage import RedisKeyValueStore
from app.infra.stores.safe_io import (
    is_record_missing,
    load_json_record,
    remove_record,
    save_json_record,
)

__all__ = [
    # Memory (dev/test)
    "MemoryKeyValueStore",
    # Origem / abas
    "OriginStorage",
    # Redis
    "RedisKeyValueStore",
    "TabStorage",
    # Helpers
    "is_record_missing",
    "load_json_record",
    "remove_record",
    "save_json_record",
]
