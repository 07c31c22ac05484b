"""Settings do carrinho persistido.

TTL, chave de storage, sincronização entre abas e regras de pedido.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class CartSettings:
    """Configurações do carrinho.

    Attributes:
        storage_key: Chave do carrinho no storage da origem
        ttl_hours: TTL padrão do carrinho
        table_ttl_hours: TTL aplicado a carrinhos de mesa
        delivery_ttl_hours: TTL aplicado a carrinhos de delivery
        sync_interval_seconds: Intervalo de re-sincronização com itens
        free_delivery_threshold: Subtotal a partir do qual a entrega é grátis
        delivery_fee: Taxa de entrega abaixo do limite
        minimum_order_value: Valor mínimo do pedido (0 = sem mínimo)
        leader_lease_seconds: Duração do lease do coordenador de mutações
    """

    storage_key: str = "digimenu-cart"
    ttl_hours: float = 24.0
    table_ttl_hours: float = 4.0
    delivery_ttl_hours: float = 2.0
    sync_interval_seconds: float = 30.0
    free_delivery_threshold: float = 50.0
    delivery_fee: float = 0.0
    minimum_order_value: float = 0.0
    leader_lease_seconds: float = 5.0

    @property
    def leader_key(self) -> str:
        return f"{self.storage_key}:leader"

    def validate(self) -> list[str]:
        """Valida configurações do carrinho.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.storage_key:
            errors.append("CART_STORAGE_KEY não pode ser vazio")

        if self.ttl_hours <= 0:
            errors.append("CART_TTL_HOURS deve ser > 0")

        if self.sync_interval_seconds <= 0:
            errors.append("CART_SYNC_INTERVAL_SECONDS deve ser > 0")

        if self.free_delivery_threshold < 0 or self.delivery_fee < 0:
            errors.append("Valores de entrega não podem ser negativos")

        if self.minimum_order_value < 0:
            errors.append("CART_MINIMUM_ORDER_VALUE não pode ser negativo")

        if self.leader_lease_seconds <= 0:
            errors.append("CART_LEADER_LEASE_SECONDS deve ser > 0")

        return errors


def _load_cart_from_env() -> CartSettings:
    """Carrega CartSettings de variáveis de ambiente."""
    return CartSettings(
        storage_key=os.getenv("CART_STORAGE_KEY", "digimenu-cart"),
        ttl_hours=float(os.getenv("CART_TTL_HOURS", "24")),
        table_ttl_hours=float(os.getenv("CART_TABLE_TTL_HOURS", "4")),
        delivery_ttl_hours=float(os.getenv("CART_DELIVERY_TTL_HOURS", "2")),
        sync_interval_seconds=float(os.getenv("CART_SYNC_INTERVAL_SECONDS", "30")),
        free_delivery_threshold=float(os.getenv("CART_FREE_DELIVERY_THRESHOLD", "50")),
        delivery_fee=float(os.getenv("CART_DELIVERY_FEE", "0")),
        minimum_order_value=float(os.getenv("CART_MINIMUM_ORDER_VALUE", "0")),
        leader_lease_seconds=float(os.getenv("CART_LEADER_LEASE_SECONDS", "5")),
    )


@lru_cache(maxsize=1)
def get_cart_settings() -> CartSettings:
    """Retorna instância cacheada de CartSettings."""
    return _load_cart_from_env()
