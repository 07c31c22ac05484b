"""Protocolos de domínio para o storage chave-valor da origem.

Contrato síncrono, no formato do localStorage: valores são strings
(JSON serializado pelo chamador).
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class KeyValueStoreProtocol(ABC):
    """Contrato mínimo para storage chave-valor.

    Implementações levantam StorageError (ou subclasse) quando o storage
    está indisponível; quem consome decide o fallback.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None: ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove_item(self, key: str) -> None: ...

    @abstractmethod
    def keys(self) -> list[str]: ...
