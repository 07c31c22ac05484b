"""Protocolos para notificação de mudanças no storage entre abas."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class StorageEvent:
    """Mudança em uma chave do storage, vista por uma aba não-escritora.

    Atributos:
        key: Chave alterada (None quando o storage inteiro foi limpo)
        old_value: Valor anterior serializado
        new_value: Valor novo serializado (None em remoção)
        source_tab_id: Aba que fez a escrita
    """

    key: str | None
    old_value: str | None
    new_value: str | None
    source_tab_id: str


StorageListener = Callable[[StorageEvent], None]
Unsubscribe = Callable[[], None]


class StorageEventChannelProtocol(ABC):
    """Canal de eventos `storage` de uma aba."""

    @abstractmethod
    def subscribe(self, listener: StorageListener) -> Unsubscribe:
        """Registra listener; retorna função que cancela a assinatura."""
