"""Notificações in-page."""

from .events import PageEventBus
from .toasts import TOAST_ADD, TOAST_CLEAR, TOAST_REMOVE, Toast, ToastNotifier, ToastType

__all__ = [
    "TOAST_ADD",
    "TOAST_CLEAR",
    "TOAST_REMOVE",
    "PageEventBus",
    "Toast",
    "ToastNotifier",
    "ToastType",
]
