"""Settings de admissão local (rate limiting).

Janela fixa por endpoint com bloqueio plano após estourar o limite.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from config.settings.base.core import env_flag


@dataclass(frozen=True)
class RateLimitSettings:
    """Configurações do rate limiter local.

    Attributes:
        default_limit: Requisições permitidas por janela
        window_seconds: Duração da janela fixa
        block_seconds: Duração do bloqueio após estourar o limite
        enabled: Se o gate de admissão está ativo no cliente de API
    """

    default_limit: int = 10
    window_seconds: int = 60
    block_seconds: int = 300
    enabled: bool = True

    def validate(self) -> list[str]:
        """Valida configurações de rate limit.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.default_limit < 1:
            errors.append("RATE_LIMIT_DEFAULT deve ser >= 1")

        if self.window_seconds < 1:
            errors.append("RATE_LIMIT_WINDOW_SECONDS deve ser >= 1")

        if self.block_seconds < 1:
            errors.append("RATE_LIMIT_BLOCK_SECONDS deve ser >= 1")

        return errors


def _load_rate_limit_from_env() -> RateLimitSettings:
    """Carrega RateLimitSettings de variáveis de ambiente."""
    return RateLimitSettings(
        default_limit=int(os.getenv("RATE_LIMIT_DEFAULT", "10")),
        window_seconds=int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60")),
        block_seconds=int(os.getenv("RATE_LIMIT_BLOCK_SECONDS", "300")),
        enabled=env_flag("RATE_LIMIT_ENABLED", default=True),
    )


@lru_cache(maxsize=1)
def get_rate_limit_settings() -> RateLimitSettings:
    """Retorna instância cacheada de RateLimitSettings."""
    return _load_rate_limit_from_env()
