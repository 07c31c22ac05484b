"""Módulo da sessão de checkout.

Exporta modelos e o serviço da sessão.
"""

from app.sessions.manager import CheckoutSessionService
from app.sessions.models import (
    AuthenticationMethod,
    CheckoutSession,
    CustomerData,
)

__all__ = [
    "AuthenticationMethod",
    "CheckoutSession",
    "CheckoutSessionService",
    "CustomerData",
]
