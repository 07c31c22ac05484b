"""Storage chave-valor em memória: apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em production. Sem persistência entre reinícios.
"""

from __future__ import annotations

from app.protocols.key_value_store import KeyValueStoreProtocol
from utils.errors import StorageQuotaExceededError, StorageUnavailableError


class MemoryKeyValueStore(KeyValueStoreProtocol):
    """Storage em memória com falhas simuláveis.

    Args:
        quota_bytes: Limite total de bytes (None = ilimitado)
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._store: dict[str, str] = {}
        self._quota_bytes = quota_bytes
        self.fail_reads = False
        self.fail_writes = False

    def _used_bytes(self, excluding: str | None = None) -> int:
        return sum(
            len(k) + len(v) for k, v in self._store.items() if k != excluding
        )

    def get_item(self, key: str) -> str | None:
        """Lê valor da memória."""
        if self.fail_reads:
            raise StorageUnavailableError("storage_read_disabled")
        return self._store.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Grava valor na memória respeitando a quota."""
        if self.fail_writes:
            raise StorageUnavailableError("storage_write_disabled")
        if self._quota_bytes is not None:
            needed = self._used_bytes(excluding=key) + len(key) + len(value)
            if needed > self._quota_bytes:
                raise StorageQuotaExceededError("storage_quota_exceeded")
        self._store[key] = value

    def remove_item(self, key: str) -> None:
        """Remove chave (no-op se ausente)."""
        if self.fail_writes:
            raise StorageUnavailableError("storage_write_disabled")
        self._store.pop(key, None)

    def keys(self) -> list[str]:
        """Lista chaves presentes."""
        if self.fail_reads:
            raise StorageUnavailableError("storage_read_disabled")
        return list(self._store)
