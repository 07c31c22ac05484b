"""Filter que injeta o contexto da aba em cada record.

Logs nunca carregam telefone, email ou nome do cliente; o contexto é só
correlation_id, tab_id e o nome do serviço.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


def _empty() -> str:
    return ""


class CorrelationIdFilter(logging.Filter):
    """Preenche correlation_id, tab_id e service.

    Valores já presentes no record (vindos de `extra`) têm prioridade
    sobre os getters. Nunca descarta records.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        tab_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._getters: dict[str, Callable[[], str]] = {
            "correlation_id": correlation_id_getter or _empty,
            "tab_id": tab_id_getter or _empty,
        }

    def filter(self, record: logging.LogRecord) -> bool:
        for attr, getter in self._getters.items():
            if not getattr(record, attr, None):
                setattr(record, attr, getter())
        record.service = self._service_name
        return True
