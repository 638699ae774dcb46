"""Shared pytest fixtures for the VESS core tests."""

import itertools

import pytest

from vess.app.state import AppStateController, Store
from vess.shared.core.event_bus import EventBus
from vess.shared.domain.config_service import ConfigService
from vess.shared.domain.models import LayerEvaluation, Sample
from vess.shared.infrastructure.persistence import MappingConfigStore


class TickingClock:
    """Deterministic epoch-millisecond clock advancing on every read."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1_000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


def make_sample(*scores: str, sample_id: str = None, **fields) -> Sample:
    """Sample with one layer per score."""
    layers = [LayerEvaluation(length="10", score=score) for score in scores]
    if sample_id is not None:
        fields["id"] = sample_id
    return Sample(name=fields.pop("name", "Sample"), num_layers=max(len(layers), 1), layers=layers, **fields)


@pytest.fixture
def preferences():
    return {}


@pytest.fixture
def memory_store(preferences):
    store = MappingConfigStore(preferences)
    yield store
    store.close()


@pytest.fixture
def config_service(memory_store):
    return ConfigService(memory_store)


@pytest.fixture
def event_bus():
    bus = EventBus()
    yield bus
    bus.clear()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def controller(config_service, event_bus, clock):
    ids = (f"id-{n}" for n in itertools.count(1))
    ctrl = AppStateController(config_service, event_bus, clock=clock, id_factory=lambda: next(ids))
    yield ctrl
    ctrl.dispose()


@pytest.fixture(autouse=True)
def reset_store():
    Store.reset()
    yield
    Store.reset()


@pytest.fixture
def sample_factory():
    return make_sample
