"""Testes do CheckoutSessionService.

Testa:
    - Criação e leitura (round-trip)
    - Expiração lazy com relógio falso
    - Identificação e avanço automático
    - Navegação validada pela FSM
    - Fallback seguro em storage falho ou registro corrompido
"""

from __future__ import annotations

import json
import re
from datetime import timedelta

import pytest

from app.domain.customer import Customer
from app.infra.stores import MemoryKeyValueStore
from app.sessions import AuthenticationMethod, CheckoutSessionService
from config.settings import CheckoutSessionSettings
from fsm import CheckoutStep
from tests.fakes.runtime import FakeClock

# ──────────────────────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def service(storage: MemoryKeyValueStore, clock: FakeClock) -> CheckoutSessionService:
    return CheckoutSessionService(storage, clock)


@pytest.fixture
def customer() -> Customer:
    return Customer(id=7, name="Ana", phone="11999990000", email="ana@example.com")


class TestSessionLifecycle:
    """Criação, leitura e descarte."""

    def test_create_then_get_returns_equal_session(
        self, service: CheckoutSessionService, clock: FakeClock
    ) -> None:
        created = service.create_session("42")

        assert service.get_current_session() == created
        assert created.current_step == CheckoutStep.AUTHENTICATION
        assert created.expires_at == clock.now() + timedelta(minutes=30)
        assert re.fullmatch(r"checkout_\d+_[a-z0-9]{9}", created.id)

    def test_session_is_persisted_under_checkout_session_key(
        self, service: CheckoutSessionService, storage: MemoryKeyValueStore
    ) -> None:
        service.create_session("42")
        raw = storage.get_item("checkout_session")
        assert raw is not None
        assert json.loads(raw)["store_id"] == "42"

    def test_expired_session_is_cleared_and_returns_none(
        self, service: CheckoutSessionService, storage: MemoryKeyValueStore, clock: FakeClock
    ) -> None:
        service.create_session("42")
        clock.advance(minutes=31)

        assert service.get_current_session() is None
        assert storage.get_item("checkout_session") is None

    def test_scenario_authenticated_session_at_29_and_31_minutes(
        self, service: CheckoutSessionService, clock: FakeClock, customer: Customer
    ) -> None:
        """Sessão criada em T: presente em T+29min com autenticação, nula em T+31min."""
        service.create_session("42")
        service.set_customer_authentication(customer, is_guest=False)

        clock.advance(minutes=29)
        session = service.get_current_session()
        assert session is not None
        assert session.is_authenticated is True

        clock.advance(minutes=2)
        assert service.get_current_session() is None

    def test_on_expired_callback_runs_once_per_discard(
        self, storage: MemoryKeyValueStore, clock: FakeClock
    ) -> None:
        calls: list[str] = []
        service = CheckoutSessionService(storage, clock, on_expired=lambda: calls.append("x"))
        service.create_session("42")
        clock.advance(minutes=31)

        service.get_current_session()
        service.get_current_session()

        assert calls == ["x"]

    def test_resolve_or_create_reuses_same_store_and_replaces_other(
        self, service: CheckoutSessionService
    ) -> None:
        first = service.resolve_or_create("42")
        again = service.resolve_or_create("42")
        other = service.resolve_or_create("99")

        assert first is not None
        assert again == first
        assert other is not None
        assert other.store_id == "99"
        assert service.resolve_or_create(None) is None

    def test_complete_checkout_discards_record(self, service: CheckoutSessionService) -> None:
        service.create_session("42")
        service.complete_checkout()
        assert service.get_current_session() is None

    def test_is_session_valid(self, service: CheckoutSessionService, clock: FakeClock) -> None:
        session = service.create_session("42")
        assert service.is_session_valid(session) is True
        assert service.is_session_valid(None) is False
        clock.advance(minutes=30, seconds=1)
        assert service.is_session_valid(session) is False

    def test_custom_duration(self, storage: MemoryKeyValueStore, clock: FakeClock) -> None:
        service = CheckoutSessionService(
            storage, clock, CheckoutSessionSettings(duration_minutes=5)
        )
        service.create_session("42")
        clock.advance(minutes=6)
        assert service.get_current_session() is None


class TestAuthentication:
    """Identificação do cliente e avanço automático."""

    def test_authenticated_customer_jumps_to_address(
        self, service: CheckoutSessionService, customer: Customer
    ) -> None:
        service.create_session("42")
        session = service.set_customer_authentication(customer, is_guest=False)

        assert session is not None
        assert session.current_step == CheckoutStep.ADDRESS
        assert session.is_authenticated is True
        assert session.is_guest is False
        assert session.customer_id == "7"
        assert session.authentication_method == AuthenticationMethod.EXISTING_ACCOUNT
        assert session.customer_data is not None
        assert session.customer_data.email == "ana@example.com"

    def test_guest_goes_to_customer_data(
        self, service: CheckoutSessionService, customer: Customer
    ) -> None:
        service.create_session("42")
        session = service.set_customer_authentication(customer, is_guest=True)

        assert session is not None
        assert session.current_step == CheckoutStep.CUSTOMER_DATA
        assert session.is_authenticated is False
        assert session.authentication_method == AuthenticationMethod.GUEST

    def test_without_session_returns_none(
        self, service: CheckoutSessionService, customer: Customer
    ) -> None:
        assert service.set_customer_authentication(customer, is_guest=True) is None

    def test_should_prompt_authentication(
        self, service: CheckoutSessionService, customer: Customer
    ) -> None:
        assert service.should_prompt_authentication() is True
        service.create_session("42")
        assert service.should_prompt_authentication() is True
        service.set_customer_authentication(customer, is_guest=True)
        assert service.should_prompt_authentication() is False

    def test_set_authentication_method(self, service: CheckoutSessionService) -> None:
        service.create_session("42")
        session = service.set_authentication_method(AuthenticationMethod.PHONE)
        assert session is not None
        assert session.authentication_method == AuthenticationMethod.PHONE


class TestNavigation:
    """Navegação livre entre etapas; tracking só após confirmation."""

    def test_same_step_is_noop_without_write(
        self, service: CheckoutSessionService, storage: MemoryKeyValueStore, clock: FakeClock
    ) -> None:
        created = service.create_session("42")
        before = storage.get_item("checkout_session")
        clock.advance(seconds=10)

        session = service.set_current_step(CheckoutStep.AUTHENTICATION)

        assert session == created
        assert storage.get_item("checkout_session") == before

    def test_forward_and_back_navigation(
        self, service: CheckoutSessionService, customer: Customer
    ) -> None:
        service.create_session("42")
        service.set_customer_authentication(customer, is_guest=False)

        forward = service.set_current_step(CheckoutStep.PAYMENT)
        back = service.set_current_step("authentication")

        assert forward is not None
        assert forward.current_step == CheckoutStep.PAYMENT
        assert back is not None
        assert back.current_step == CheckoutStep.AUTHENTICATION

    def test_guest_table_flow_skips_address(
        self, service: CheckoutSessionService, customer: Customer, clock: FakeClock
    ) -> None:
        service.create_session("42")
        service.set_customer_authentication(customer, is_guest=True)
        clock.advance(minutes=1)

        at_payment = service.set_current_step(CheckoutStep.PAYMENT)

        assert at_payment is not None
        assert at_payment.current_step == CheckoutStep.PAYMENT
        assert at_payment.last_activity == clock.now()
        assert service.get_current_progress() == 80.0

        at_confirmation = service.set_current_step(CheckoutStep.CONFIRMATION)
        assert at_confirmation is not None
        assert at_confirmation.current_step == CheckoutStep.CONFIRMATION
        assert service.get_current_progress() == 100.0

    def test_navigation_before_identification_is_free(
        self, service: CheckoutSessionService
    ) -> None:
        service.create_session("42")
        session = service.set_current_step(CheckoutStep.CUSTOMER_DATA)
        assert session is not None
        assert session.current_step == CheckoutStep.CUSTOMER_DATA

    def test_tracking_before_confirmation_returns_session_unchanged(
        self, service: CheckoutSessionService, storage: MemoryKeyValueStore
    ) -> None:
        service.create_session("42")
        service.set_current_step(CheckoutStep.PAYMENT)
        before = storage.get_item("checkout_session")

        session = service.set_current_step(CheckoutStep.TRACKING)

        assert session is not None
        assert session.current_step == CheckoutStep.PAYMENT
        assert storage.get_item("checkout_session") == before

    def test_confirmation_to_tracking(self, service: CheckoutSessionService) -> None:
        service.create_session("42")
        service.set_current_step(CheckoutStep.CONFIRMATION)
        session = service.set_current_step(CheckoutStep.TRACKING)
        assert session is not None
        assert session.current_step == CheckoutStep.TRACKING

    def test_progress(self, service: CheckoutSessionService, customer: Customer) -> None:
        assert service.get_current_progress() == 0.0
        service.create_session("42")
        assert service.get_current_progress() == 20.0
        service.set_customer_authentication(customer, is_guest=False)
        assert service.get_current_progress() == 60.0
        assert CheckoutSessionService.get_progress_percentage(None) == 0.0

    def test_next_step_after_authentication_is_pure(self) -> None:
        assert (
            CheckoutSessionService.get_next_step_after_authentication(True, False)
            == CheckoutStep.ADDRESS
        )
        assert (
            CheckoutSessionService.get_next_step_after_authentication(False, False)
            == CheckoutStep.AUTHENTICATION
        )


class TestActivity:
    """Atividade e extensão deslizam a expiração."""

    def test_update_session_touches_last_activity_only(
        self, service: CheckoutSessionService, clock: FakeClock
    ) -> None:
        created = service.create_session("42")
        clock.advance(minutes=10)

        updated = service.update_session(customer_id="9")

        assert updated is not None
        assert updated.customer_id == "9"
        assert updated.last_activity == clock.now()
        assert updated.expires_at == created.expires_at

    def test_update_session_rejects_unknown_field(self, service: CheckoutSessionService) -> None:
        service.create_session("42")
        with pytest.raises(TypeError):
            service.update_session(favorite_color="azul")

    def test_activity_keeps_session_alive(
        self, service: CheckoutSessionService, clock: FakeClock
    ) -> None:
        service.create_session("42")
        clock.advance(minutes=20)
        service.update_activity()
        clock.advance(minutes=20)

        assert service.get_current_session() is not None

    def test_extend_session_slides_expiry(
        self, service: CheckoutSessionService, clock: FakeClock
    ) -> None:
        service.create_session("42")
        clock.advance(minutes=5)
        extended = service.extend_session()
        assert extended is not None
        assert extended.expires_at == clock.now() + timedelta(minutes=30)

    def test_mutations_without_session_return_none(self, service: CheckoutSessionService) -> None:
        assert service.update_session(customer_id="1") is None
        assert service.set_current_step(CheckoutStep.PAYMENT) is None
        assert service.extend_session() is None


class TestStorageFallback:
    """Falhas de storage nunca chegam ao chamador."""

    def test_corrupt_json_is_cleared(
        self, service: CheckoutSessionService, storage: MemoryKeyValueStore
    ) -> None:
        storage.set_item("checkout_session", "{not json")
        assert service.get_current_session() is None
        assert storage.get_item("checkout_session") is None

    def test_record_missing_fields_is_cleared(
        self, service: CheckoutSessionService, storage: MemoryKeyValueStore
    ) -> None:
        storage.set_item("checkout_session", json.dumps({"id": "x"}))
        assert service.get_current_session() is None
        assert storage.get_item("checkout_session") is None

    def test_unreadable_storage_means_no_session(
        self, service: CheckoutSessionService, storage: MemoryKeyValueStore
    ) -> None:
        service.create_session("42")
        storage.fail_reads = True
        assert service.get_current_session() is None

    def test_write_failure_still_returns_session(
        self, service: CheckoutSessionService, storage: MemoryKeyValueStore
    ) -> None:
        storage.fail_writes = True
        session = service.create_session("42")
        assert session.store_id == "42"
        storage.fail_writes = False
        assert service.get_current_session() is None
