"""Itens do carrinho e seus adicionais.

Modelos validados na entrada (quantidade >= 1, preços não negativos);
o CartStore trabalha sempre com cópias imutáveis.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartAdditional(BaseModel):
    """Adicional escolhido para um item (ex: bacon extra).

    O id pode chegar como string não numérica de call sites antigos;
    a normalização para int fica em app.cart.merge.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    name: str
    price: float = Field(0.0, ge=0)
    quantity: int = Field(1, ge=1)


class CartItem(BaseModel):
    """Entrada do carrinho.

    `id` é atribuído pelo store na criação; itens vindos da UI chegam
    sem id.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    product_id: int | str
    identify: str = ""
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    notes: str | None = None
    additionals: list[CartAdditional] = Field(default_factory=list)
    image: str | None = None

    @field_validator("notes")
    @classmethod
    def _blank_notes_as_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @property
    def line_total(self) -> float:
        """Preço da linha: base * quantidade + soma dos adicionais."""
        additionals = sum(a.price * a.quantity for a in self.additionals)
        return self.price * self.quantity + additionals

    def to_storage_dict(self) -> dict[str, Any]:
        """Serializa para o registro persistido."""
        return self.model_dump(mode="json")
