"""Settings do cliente de API.

Base URL vem de variável de ambiente; sem ela, deriva do hostname.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

LOCAL_API_BASE_URL = "http://localhost:8000/api/v1"
_LOCAL_HOSTNAMES = frozenset({"", "localhost", "127.0.0.1", "0.0.0.0"})


def resolve_api_base_url(configured: str, hostname: str) -> str:
    """Resolve a base URL da API.

    Args:
        configured: Valor de API_BASE_URL/NEXT_PUBLIC_API_URL (pode ser vazio)
        hostname: Hostname onde o front end está servido

    Returns:
        URL sem barra final
    """
    if configured:
        return configured.rstrip("/")
    host = hostname.strip().lower()
    if host in _LOCAL_HOSTNAMES:
        return LOCAL_API_BASE_URL
    return f"https://api.{host}/api/v1"


@dataclass(frozen=True)
class ApiSettings:
    """Configurações do cliente de API.

    Attributes:
        base_url: URL base já resolvida
        timeout_seconds: Timeout por tentativa
        token_storage_key: Chave do token bearer no storage
    """

    base_url: str = LOCAL_API_BASE_URL
    timeout_seconds: float = 30.0
    token_storage_key: str = "token"

    def validate(self) -> list[str]:
        """Valida configurações do cliente de API.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.base_url.startswith(("http://", "https://")):
            errors.append(f"API_BASE_URL inválida: {self.base_url}")

        if self.timeout_seconds <= 0:
            errors.append("API_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_api_from_env() -> ApiSettings:
    """Carrega ApiSettings de variáveis de ambiente."""
    configured = os.getenv("API_BASE_URL") or os.getenv("NEXT_PUBLIC_API_URL", "")
    return ApiSettings(
        base_url=resolve_api_base_url(configured, os.getenv("APP_HOSTNAME", "")),
        timeout_seconds=float(os.getenv("API_TIMEOUT_SECONDS", "30")),
        token_storage_key=os.getenv("API_TOKEN_STORAGE_KEY", "token"),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> ApiSettings:
    """Retorna instância cacheada de ApiSettings."""
    return _load_api_from_env()
