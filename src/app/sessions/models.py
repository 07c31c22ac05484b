"""Modelo da sessão de checkout.

Estrutura persistida em JSON (datas ISO-8601) sob a chave
`checkout_session`. A sessão é descartada, nunca arquivada.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from fsm.states import DEFAULT_INITIAL_STEP, CheckoutStep, is_terminal


class AuthenticationMethod(StrEnum):
    """Como o cliente se identificou."""

    PHONE = "phone"
    GUEST = "guest"
    EXISTING_ACCOUNT = "existing_account"
    NEW_ACCOUNT = "new_account"


@dataclass(frozen=True, slots=True)
class CustomerData:
    """Snapshot dos dados de contato do cliente (PII).

    Atributos:
        name: Nome informado
        phone: Telefone informado
        email: Email (vazio quando não informado)
    """

    name: str
    phone: str
    email: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "phone": self.phone, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomerData:
        return cls(
            name=str(data.get("name", "")),
            phone=str(data.get("phone", "")),
            email=str(data.get("email") or ""),
        )


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """Sessão de checkout de uma loja.

    Imutável: toda mudança gera uma nova instância via dataclasses.replace.

    Atributos:
        id: Token opaco (checkout_<epoch_ms>_<aleatório>)
        store_id: Loja dona da sessão
        current_step: Etapa atual da FSM
        started_at: Criação
        last_activity: Última mutação ou atividade
        expires_at: Leitura após este instante trata a sessão como inexistente
        customer_id: Id do cliente identificado
        is_authenticated: Cliente com conta
        is_guest: Cliente seguindo como convidado
        authentication_method: Como se identificou
        customer_data: Snapshot de contato
    """

    id: str
    store_id: str
    current_step: CheckoutStep
    started_at: datetime
    last_activity: datetime
    expires_at: datetime
    customer_id: str | None = None
    is_authenticated: bool = False
    is_guest: bool = False
    authentication_method: AuthenticationMethod | None = None
    customer_data: CustomerData | None = None

    @property
    def is_terminal(self) -> bool:
        """Verifica se está em etapa terminal."""
        return is_terminal(self.current_step)

    def is_expired_at(self, now: datetime) -> bool:
        """Expirada quando now > expires_at (o próprio instante ainda vale)."""
        return now > self.expires_at

    def to_dict(self) -> dict[str, Any]:
        """Serializa sessão para persistência.

        Returns:
            Dict serializável para JSON
        """
        return {
            "id": self.id,
            "store_id": self.store_id,
            "customer_id": self.customer_id,
            "is_authenticated": self.is_authenticated,
            "is_guest": self.is_guest,
            "authentication_method": (
                self.authentication_method.value if self.authentication_method else None
            ),
            "customer_data": self.customer_data.to_dict() if self.customer_data else None,
            "current_step": self.current_step.value,
            "started_at": self.started_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckoutSession:
        """Deserializa sessão de persistência.

        Raises:
            KeyError: Campo obrigatório ausente
            ValueError: Data, etapa ou método inválido
            TypeError: Tipo inesperado em algum campo
        """
        customer_raw = data.get("customer_data")
        method_raw = data.get("authentication_method")
        customer_id = data.get("customer_id")
        return cls(
            id=str(data["id"]),
            store_id=str(data["store_id"]),
            customer_id=str(customer_id) if customer_id is not None else None,
            is_authenticated=bool(data.get("is_authenticated", False)),
            is_guest=bool(data.get("is_guest", False)),
            authentication_method=AuthenticationMethod(method_raw) if method_raw else None,
            customer_data=(
                CustomerData.from_dict(customer_raw) if isinstance(customer_raw, dict) else None
            ),
            current_step=CheckoutStep(data.get("current_step", DEFAULT_INITIAL_STEP.value)),
            started_at=datetime.fromisoformat(data["started_at"]),
            last_activity=datetime.fromisoformat(data["last_activity"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
        )
