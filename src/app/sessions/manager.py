"""Serviço da sessão de checkout.

Cria, lê, avança e descarta a sessão de checkout persistida no storage
da origem. A expiração é verificada na leitura, com o relógio injetado;
não existe timer de fundo.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import replace
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from app.infra.stores.safe_io import load_json_record, remove_record, save_json_record
from app.sessions.models import AuthenticationMethod, CheckoutSession, CustomerData
from config.settings.base.session import CheckoutSessionSettings
from fsm import (
    DEFAULT_INITIAL_STEP,
    CheckoutStateMachine,
    CheckoutStep,
    get_next_step_after_authentication,
    progress_percentage,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.customer import Customer
    from app.protocols.key_value_store import KeyValueStoreProtocol
    from app.protocols.runtime import ClockProtocol

logger = logging.getLogger(__name__)

_COMPONENT = "checkout_session"
_ID_ALPHABET = string.ascii_lowercase + string.digits


def _random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class CheckoutSessionService:
    """Gerencia a sessão de checkout de uma aba.

    Construído explicitamente pelo composition root; não há instância
    global. Falhas de storage nunca chegam ao chamador: leitura vira
    "sem sessão" e escrita falha fica só em memória (registrada em log).
    """

    __slots__ = ("_clock", "_id_factory", "_on_expired", "_settings", "_storage")

    def __init__(
        self,
        storage: KeyValueStoreProtocol,
        clock: ClockProtocol,
        settings: CheckoutSessionSettings | None = None,
        id_factory: Callable[[], str] | None = None,
        on_expired: Callable[[], None] | None = None,
    ) -> None:
        """Inicializa o serviço.

        Args:
            storage: Storage da aba (localStorage)
            clock: Relógio usado para expiração
            settings: Duração e chave do registro
            id_factory: Gerador de id (padrão: checkout_<epoch_ms>_<9 chars>)
            on_expired: Chamado quando uma sessão expirada é descartada
        """
        self._storage = storage
        self._clock = clock
        self._settings = settings or CheckoutSessionSettings()
        self._id_factory = id_factory or self._default_session_id
        self._on_expired = on_expired

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self._settings.duration_minutes)

    def _default_session_id(self) -> str:
        epoch_ms = int(self._clock.timestamp() * 1000)
        return f"checkout_{epoch_ms}_{_random_suffix()}"

    # ──────────────────────────────────────────────────────────────
    # Persistência
    # ──────────────────────────────────────────────────────────────

    def _persist(self, session: CheckoutSession) -> CheckoutSession:
        save_json_record(self._storage, self._settings.storage_key, session.to_dict(), _COMPONENT)
        return session

    def _load(self) -> CheckoutSession | None:
        data = load_json_record(self._storage, self._settings.storage_key, _COMPONENT)
        if data is None:
            return None
        try:
            return CheckoutSession.from_dict(data)
        except (KeyError, ValueError, TypeError) as exc:
            logger.warning(
                "checkout_session_corrupt",
                extra={"error": type(exc).__name__},
            )
            self.clear_session()
            return None

    # ──────────────────────────────────────────────────────────────
    # Ciclo de vida
    # ──────────────────────────────────────────────────────────────

    def create_session(self, store_id: str) -> CheckoutSession:
        """Cria e persiste uma nova sessão na etapa inicial.

        Args:
            store_id: Loja do checkout

        Returns:
            Sessão criada (mesmo se a gravação falhar)
        """
        now = self._clock.now()
        session = CheckoutSession(
            id=self._id_factory(),
            store_id=str(store_id),
            current_step=DEFAULT_INITIAL_STEP,
            started_at=now,
            last_activity=now,
            expires_at=now + self.duration,
        )
        logger.info(
            "checkout_session_created",
            extra={"session_id": session.id, "store_id": session.store_id},
        )
        return self._persist(session)

    def get_current_session(self) -> CheckoutSession | None:
        """Lê a sessão persistida.

        Sessão expirada é removida do storage e tratada como inexistente.
        """
        session = self._load()
        if session is None:
            return None
        if session.is_expired_at(self._clock.now()):
            logger.info(
                "checkout_session_expired",
                extra={"session_id": session.id, "store_id": session.store_id},
            )
            self.clear_session()
            if self._on_expired is not None:
                self._on_expired()
            return None
        return session

    def resolve_or_create(self, store_id: str | None) -> CheckoutSession | None:
        """Reaproveita a sessão da mesma loja ou cria uma nova.

        Sem store_id não há checkout: retorna None sem criar nada.
        """
        if not store_id:
            return None
        current = self.get_current_session()
        if current is not None and current.store_id == str(store_id):
            logger.debug("checkout_session_resolved", extra={"session_id": current.id})
            return current
        return self.create_session(str(store_id))

    def clear_session(self) -> None:
        """Remove a sessão do storage."""
        remove_record(self._storage, self._settings.storage_key, _COMPONENT)

    def complete_checkout(self) -> None:
        """Pedido enviado: a sessão é descartada, não arquivada."""
        session = self._load()
        if session is not None:
            logger.info(
                "checkout_session_completed",
                extra={"session_id": session.id, "store_id": session.store_id},
            )
        self.clear_session()

    def is_session_valid(self, session: CheckoutSession | None) -> bool:
        """Sessão informada existe e now <= expires_at."""
        if session is None:
            return False
        return not session.is_expired_at(self._clock.now())

    # ──────────────────────────────────────────────────────────────
    # Mutações
    # ──────────────────────────────────────────────────────────────

    def update_session(self, **changes: Any) -> CheckoutSession | None:
        """Mescla campos na sessão atual e renova last_activity.

        Raises:
            TypeError: Campo desconhecido em changes
        """
        session = self.get_current_session()
        if session is None:
            return None
        updated = replace(session, **{**changes, "last_activity": self._clock.now()})
        return self._persist(updated)

    def set_customer_authentication(
        self,
        customer: Customer,
        is_guest: bool,
        method: AuthenticationMethod | None = None,
    ) -> CheckoutSession | None:
        """Registra o cliente identificado e avança a etapa automaticamente.

        Convidado vai para customer_data; autenticado vai para address.

        Args:
            customer: Cliente retornado pela autenticação
            is_guest: Seguindo sem conta
            method: Método usado (padrão: guest ou existing_account)

        Returns:
            Sessão atualizada ou None se não houver sessão válida
        """
        session = self.get_current_session()
        if session is None:
            return None

        is_authenticated = not is_guest
        resolved_method = method or (
            AuthenticationMethod.GUEST if is_guest else AuthenticationMethod.EXISTING_ACCOUNT
        )
        machine = CheckoutStateMachine(session.current_step, session_id=session.id)
        result = machine.advance_after_authentication(is_authenticated, is_guest)
        next_step = machine.current_step if result.success else session.current_step

        updated = replace(
            session,
            customer_id=str(customer.id),
            is_authenticated=is_authenticated,
            is_guest=is_guest,
            authentication_method=resolved_method,
            customer_data=CustomerData(
                name=customer.name,
                phone=customer.phone,
                email=customer.email or "",
            ),
            current_step=next_step,
            last_activity=self._clock.now(),
        )
        logger.info(
            "checkout_customer_identified",
            extra={
                "session_id": session.id,
                "method": resolved_method.value,
                "from_step": session.current_step.value,
                "to_step": next_step.value,
            },
        )
        return self._persist(updated)

    def set_authentication_method(
        self,
        method: AuthenticationMethod,
    ) -> CheckoutSession | None:
        """Registra o método escolhido antes da identificação concluir."""
        return self.update_session(authentication_method=AuthenticationMethod(method))

    def set_current_step(self, step: CheckoutStep | str) -> CheckoutSession | None:
        """Muda a etapa atual.

        Mesma etapa é no-op (retorna a sessão sem gravar). Navegação entre as
        etapas do checkout é livre (mesa pula address); só tracking é
        restrito: exige confirmation e não tem saída. Rejeição devolve a
        sessão inalterada.
        """
        session = self.get_current_session()
        if session is None:
            return None

        target = CheckoutStep(step)
        if target == session.current_step:
            return session

        machine = CheckoutStateMachine(session.current_step, session_id=session.id)
        result = machine.transition(target, trigger="user_navigation")
        if not result.success:
            logger.warning(
                "checkout_step_rejected",
                extra={
                    "session_id": session.id,
                    "from_step": session.current_step.value,
                    "to_step": target.value,
                    "reason": result.error_reason,
                },
            )
            return session

        logger.info(
            "checkout_step_changed",
            extra={
                "session_id": session.id,
                "from_step": session.current_step.value,
                "to_step": target.value,
            },
        )
        updated = replace(session, current_step=target, last_activity=self._clock.now())
        return self._persist(updated)

    def update_activity(self) -> CheckoutSession | None:
        """Interação do usuário: renova last_activity e desliza expires_at."""
        return self.extend_session()

    def extend_session(self) -> CheckoutSession | None:
        """Desliza expires_at para now + duração."""
        session = self.get_current_session()
        if session is None:
            return None
        now = self._clock.now()
        updated = replace(session, last_activity=now, expires_at=now + self.duration)
        return self._persist(updated)

    # ──────────────────────────────────────────────────────────────
    # Consultas
    # ──────────────────────────────────────────────────────────────

    def should_prompt_authentication(self) -> bool:
        """Exibir a tela de identificação?

        Sem sessão: sim. Com sessão: só se ainda não identificado e na
        etapa authentication.
        """
        session = self.get_current_session()
        if session is None:
            return True
        return (
            not session.is_authenticated
            and not session.is_guest
            and session.current_step == CheckoutStep.AUTHENTICATION
        )

    @staticmethod
    def get_next_step_after_authentication(
        is_authenticated: bool,
        is_guest: bool,
    ) -> CheckoutStep:
        """Tabela fixa: convidado → customer_data, autenticado → address."""
        return get_next_step_after_authentication(is_authenticated, is_guest)

    @staticmethod
    def get_progress_percentage(session: CheckoutSession | None) -> float:
        """Progresso em [0, 100]; 0 sem sessão."""
        if session is None:
            return 0.0
        return progress_percentage(session.current_step)

    def get_current_progress(self) -> float:
        """Progresso da sessão persistida."""
        return self.get_progress_percentage(self.get_current_session())
