"""Settings de retry/backoff.

Os dois pontos de retry (cliente de API e error boundary) compartilham a
fórmula base * 2**tentativa, mas têm limites próprios.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from config.settings.base.core import env_flag


@dataclass(frozen=True)
class RetrySettings:
    """Configurações de retry.

    Attributes:
        api_max_retries: Retries de transporte por requisição
        api_backoff_base_seconds: Base do backoff do cliente de API
        boundary_max_retries: Retries de render antes do estado terminal
        boundary_retry_delay_seconds: Base do backoff do error boundary
        boundary_auto_retry: Se o boundary agenda retry automático
    """

    api_max_retries: int = 3
    api_backoff_base_seconds: float = 1.0
    boundary_max_retries: int = 3
    boundary_retry_delay_seconds: float = 1.0
    boundary_auto_retry: bool = True

    def validate(self) -> list[str]:
        """Valida configurações de retry.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.api_max_retries < 0:
            errors.append("API_MAX_RETRIES deve ser >= 0")

        if self.api_backoff_base_seconds <= 0:
            errors.append("API_BACKOFF_BASE_SECONDS deve ser > 0")

        if self.boundary_max_retries < 0:
            errors.append("BOUNDARY_MAX_RETRIES deve ser >= 0")

        if self.boundary_retry_delay_seconds <= 0:
            errors.append("BOUNDARY_RETRY_DELAY_SECONDS deve ser > 0")

        return errors


def _load_retry_from_env() -> RetrySettings:
    """Carrega RetrySettings de variáveis de ambiente."""
    return RetrySettings(
        api_max_retries=int(os.getenv("API_MAX_RETRIES", "3")),
        api_backoff_base_seconds=float(os.getenv("API_BACKOFF_BASE_SECONDS", "1.0")),
        boundary_max_retries=int(os.getenv("BOUNDARY_MAX_RETRIES", "3")),
        boundary_retry_delay_seconds=float(
            os.getenv("BOUNDARY_RETRY_DELAY_SECONDS", "1.0")
        ),
        boundary_auto_retry=env_flag("BOUNDARY_AUTO_RETRY", default=True),
    )


@lru_cache(maxsize=1)
def get_retry_settings() -> RetrySettings:
    """Retorna instância cacheada de RetrySettings."""
    return _load_retry_from_env()
