"""Contexto de rastreamento: correlation_id e aba corrente.

Usa ContextVar para ser async-safe; cada aba simulada roda suas
corrotinas com seu próprio tab_id.

Uso:
    from app.observability import get_correlation_id, set_correlation_id

    token = set_correlation_id()
    try:
        await client.get("/products")
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_tab_id: ContextVar[str] = ContextVar("tab_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (vazio se não definido)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or generate_correlation_id()
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


def get_tab_id() -> str:
    """Retorna o id da aba do contexto atual."""
    return _tab_id.get()


def set_tab_id(tab_id: str) -> Token[str]:
    """Define o id da aba no contexto atual."""
    return _tab_id.set(tab_id)


def reset_tab_id(token: Token[str]) -> None:
    """Restaura o tab_id ao valor anterior."""
    _tab_id.reset(token)
