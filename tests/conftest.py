import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from network_blocker import install_network_blocker

from core.http.session import SessionState


@pytest.fixture(autouse=True)
def _default_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    install_network_blocker(monkeypatch)
    SessionState.session = None


class FakeClock:
    """Manually advanced time source for caches, breakers and limiters."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, amount: float) -> None:
        self.now += amount


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
