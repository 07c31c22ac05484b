"""Fórmula única de backoff exponencial: base * 2**tentativa."""

from __future__ import annotations


def compute_backoff_delay(
    attempt: int,
    base_seconds: float,
    max_seconds: float | None = None,
) -> float:
    """Calcula a espera antes da próxima tentativa.

    Args:
        attempt: Tentativa que falhou (0-based)
        base_seconds: Espera da primeira repetição
        max_seconds: Teto opcional

    Returns:
        Atraso em segundos

    Raises:
        ValueError: Se attempt for negativo
    """
    if attempt < 0:
        raise ValueError(f"attempt deve ser >= 0, recebido: {attempt}")
    delay = base_seconds * (2**attempt)
    if max_seconds is not None:
        return min(delay, max_seconds)
    return delay


def backoff_schedule(base_seconds: float, attempts: int) -> list[float]:
    """Sequência de atrasos para as primeiras `attempts` repetições."""
    return [compute_backoff_delay(n, base_seconds) for n in range(attempts)]
