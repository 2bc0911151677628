import random

import pytest

from pairs_app.config.settings import settings
from pairs_app.services import session_store
from pairs_app.services.game_engine import GameSession


class FakeClock:
    """Horloge déterministe : avance de `step` secondes à chaque lecture."""

    def __init__(self, start: float = 1_000.0, step: float = 1.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture(autouse=True)
def isolated_store(tmp_path, monkeypatch):
    """Registre vide et DATA_DIR temporaire pour chaque test."""
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(settings, "PERSIST_SESSIONS", False)
    session_store.clear_sessions()
    yield
    session_store.clear_sessions()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_session(clock):
    def _make(session_id: str = "test", seed: int = 7, max_pairs: int | None = None) -> GameSession:
        session = GameSession(session_id=session_id, clock=clock, rng=random.Random(seed))
        if max_pairs is not None:
            session.max_pairs = max_pairs
        return session

    return _make
