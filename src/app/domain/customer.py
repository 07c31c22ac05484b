"""Customer - snapshot do cliente identificado no checkout.

Vem da camada de autenticação (telefone/OTP, conta existente ou
cadastro rápido). Contém PII: nunca logar o modelo inteiro.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Customer(BaseModel):
    """Cliente retornado pela autenticação."""

    model_config = ConfigDict(frozen=True)

    id: int | str = Field(..., description="Id do cliente no backend")
    name: str = ""
    phone: str = ""
    email: str | None = Field(None, pattern=r"^[^@]+@[^@]+\.[^@]+$")
