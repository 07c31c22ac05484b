"""Settings do storage chave-valor.

Seleciona o backend que faz o papel do localStorage da origem.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

StorageBackend = Literal["memory", "redis"]


@dataclass(frozen=True)
class StorageSettings:
    """Configurações do storage.

    Attributes:
        backend: memory (processo local) ou redis (compartilhado)
        redis_url: URL de conexão Redis
        key_prefix: Namespace das chaves no Redis
    """

    backend: StorageBackend = "memory"
    redis_url: str = ""
    key_prefix: str = "digimenu:"

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de storage.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in {"memory", "redis"}:
            errors.append(f"STORAGE_BACKEND inválido: {self.backend}")

        if self.backend == "redis" and not self.redis_url:
            errors.append("REDIS_URL obrigatório quando STORAGE_BACKEND=redis")

        if self.backend == "memory" and base.is_production:
            errors.append("STORAGE_BACKEND=memory proibido em production")

        return errors


def _load_storage_from_env() -> StorageSettings:
    """Carrega StorageSettings de variáveis de ambiente."""
    backend_str = os.getenv("STORAGE_BACKEND", "memory").lower()
    backend: StorageBackend = backend_str if backend_str in ("memory", "redis") else "memory"
    return StorageSettings(
        backend=backend,
        redis_url=os.getenv("REDIS_URL", ""),
        key_prefix=os.getenv("STORAGE_KEY_PREFIX", "digimenu:"),
    )


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """Retorna instância cacheada de StorageSettings."""
    return _load_storage_from_env()
