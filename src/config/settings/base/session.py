"""Settings da sessão de checkout.

Duração e chave de persistência da sessão.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class CheckoutSessionSettings:
    """Configurações da sessão de checkout.

    Attributes:
        duration_minutes: Janela de validade a partir da última extensão
        storage_key: Chave do registro no storage
    """

    duration_minutes: int = 30
    storage_key: str = "checkout_session"

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60

    def validate(self) -> list[str]:
        """Valida configurações de sessão.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.duration_minutes <= 0:
            errors.append("CHECKOUT_SESSION_MINUTES deve ser > 0")

        if not self.storage_key:
            errors.append("CHECKOUT_SESSION_KEY não pode ser vazio")

        return errors


def _load_session_from_env() -> CheckoutSessionSettings:
    """Carrega CheckoutSessionSettings de variáveis de ambiente."""
    return CheckoutSessionSettings(
        duration_minutes=int(os.getenv("CHECKOUT_SESSION_MINUTES", "30")),
        storage_key=os.getenv("CHECKOUT_SESSION_KEY", "checkout_session"),
    )


@lru_cache(maxsize=1)
def get_checkout_session_settings() -> CheckoutSessionSettings:
    """Retorna instância cacheada de CheckoutSessionSettings."""
    return _load_session_from_env()
