"""Configuração do pytest para o projeto digimenu-checkout."""

import sys
from pathlib import Path

import pytest

# Adiciona src/ e a raiz ao PYTHONPATH para permitir imports absolutos
root_path = Path(__file__).parent.parent
for path in (root_path, root_path / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from app.infra.stores import MemoryKeyValueStore  # noqa: E402
from tests.fakes.runtime import FakeClock, FakeScheduler  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> FakeScheduler:
    return FakeScheduler(clock)


@pytest.fixture
def storage() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()
