"""Settings base do digimenu-checkout.

Ambiente, identificação do serviço e formato dos logs. Lidas uma vez
por processo (ver get_base_settings) e compartilhadas por todas as abas.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

Environment = Literal["development", "staging", "production"]
LogFormat = Literal["json", "text"]

VALID_ENVIRONMENTS: frozenset[str] = frozenset({"development", "staging", "production"})
VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Apelidos aceitos em ENVIRONMENT
_ENVIRONMENT_ALIASES: dict[str, Environment] = {
    "prod": "production",
    "production": "production",
    "stage": "staging",
    "staging": "staging",
    "dev": "development",
    "development": "development",
    "local": "development",
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class BaseSettings:
    """Configurações comuns ao processo.

    Attributes:
        environment: development | staging | production
        service_name: Campo `service` de todo log
        log_level: Nível do root logger
        log_format: json (padrão) ou text para leitura local
        debug: Habilita detalhes extras em erros de desenvolvimento
    """

    environment: Environment = "development"
    service_name: str = "digimenu-checkout"
    log_level: str = "INFO"
    log_format: LogFormat = "json"
    debug: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def validate(self) -> list[str]:
        """Retorna a lista de erros (vazia = OK)."""
        errors: list[str] = []
        if self.environment not in VALID_ENVIRONMENTS:
            errors.append(f"ENVIRONMENT inválido: {self.environment}")
        if not self.service_name.strip():
            errors.append("SERVICE_NAME não pode ser vazio")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"LOG_LEVEL inválido: {self.log_level}")
        if self.log_format not in ("json", "text"):
            errors.append(f"LOG_FORMAT inválido: {self.log_format}")
        if self.debug and self.is_production:
            errors.append("DEBUG não pode estar ativo em production")
        return errors


def parse_environment(raw: str) -> Environment:
    """Normaliza ENVIRONMENT; valor desconhecido cai em development."""
    return _ENVIRONMENT_ALIASES.get(raw.strip().lower(), "development")


def env_flag(name: str, default: bool = False) -> bool:
    """Lê uma flag booleana do ambiente (1/true/yes/on)."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """Retorna BaseSettings carregada do ambiente (cacheada)."""
    log_format = os.getenv("LOG_FORMAT", "json").strip().lower()
    return BaseSettings(
        environment=parse_environment(os.getenv("ENVIRONMENT", "development")),
        service_name=os.getenv("SERVICE_NAME", "digimenu-checkout"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format="text" if log_format == "text" else "json",
        debug=env_flag("DEBUG"),
    )
