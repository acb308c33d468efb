import numpy as np
import pytest

from pillarlab.agents.q_agent import QAgent
from pillarlab.storage import MemoryStore


class FixedRng:
    """Fuente aleatoria guionizada: siempre devuelve los mismos valores."""

    def __init__(self, value=0.99, index=0):
        self.value = value
        self.index = index

    def random(self):
        return self.value

    def integers(self, n):
        return self.index % n


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def agent(store):
    # Sin exploración: la política es siempre la voraz
    return QAgent(store=store, rng=FixedRng(value=0.99))


@pytest.fixture
def rng():
    return np.random.default_rng(7)
