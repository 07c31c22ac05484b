"""Leitura e escrita de registros JSON com fallback seguro.

Toda falha de storage (indisponível, quota, JSON corrompido) é
registrada em log e convertida em valor padrão; nada é relançado.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from app.protocols.key_value_store import KeyValueStoreProtocol
from config.logging import log_fallback
from utils.errors import StorageError

logger = logging.getLogger(__name__)


def load_json_record(
    storage: KeyValueStoreProtocol,
    key: str,
    component: str,
) -> dict[str, Any] | None:
    """Lê e decodifica um registro.

    Registro corrompido (JSON inválido ou não-objeto) é removido.

    Returns:
        Dict decodificado ou None (ausente, corrompido ou storage falhou)
    """
    try:
        raw = storage.get_item(key)
    except StorageError as exc:
        log_fallback(logger, component, reason=type(exc).__name__, key=key)
        return None
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        log_fallback(logger, component, reason="corrupt_record", key=key)
        remove_record(storage, key, component)
        return None
    if not isinstance(data, dict):
        log_fallback(logger, component, reason="corrupt_record", key=key)
        remove_record(storage, key, component)
        return None
    return data


def is_record_missing(
    storage: KeyValueStoreProtocol,
    key: str,
    component: str,
) -> bool:
    """True só se a leitura funcionou e o registro não existe."""
    try:
        return storage.get_item(key) is None
    except StorageError as exc:
        log_fallback(logger, component, reason=type(exc).__name__, key=key)
        return False


def save_json_record(
    storage: KeyValueStoreProtocol,
    key: str,
    data: dict[str, Any],
    component: str,
) -> bool:
    """Serializa e grava um registro.

    Returns:
        True se gravou; False se o storage falhou (estado segue só em memória)
    """
    try:
        storage.set_item(key, json.dumps(data, separators=(",", ":")))
    except StorageError as exc:
        log_fallback(logger, component, reason=type(exc).__name__, key=key)
        return False
    return True


def remove_record(
    storage: KeyValueStoreProtocol,
    key: str,
    component: str,
) -> bool:
    """Remove um registro; False se o storage falhou."""
    try:
        storage.remove_item(key)
    except StorageError as exc:
        log_fallback(logger, component, reason=type(exc).__name__, key=key)
        return False
    return True
