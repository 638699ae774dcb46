"""Tests for the ConfigStore backends, the factory and ConfigService."""

import asyncio
import json

import pytest

from vess.shared.core.errors import PersistenceError
from vess.shared.core.configuration import StorageSettings
from vess.shared.domain.config_service import ConfigService
from vess.shared.domain.models import DEFAULT_LANGUAGE, Config
from vess.shared.infrastructure.persistence import (
    DuckDBConfigStore,
    MappingConfigStore,
    YamlConfigStore,
)
from vess.shared.infrastructure.persistence.factory import TargetType, build_config_store
from vess.shared.infrastructure.platform import PlatformContext

ANA = Config(
    name="Ana Souza",
    email="ana@example.org",
    country="Brasil",
    address="Rua das Flores 10",
    city_state="Curitiba - PR",
)


@pytest.fixture(params=["memory", "desktop", "embedded"])
def store_pair(request, tmp_path):
    """Factory producing fresh store instances over the same durable storage."""
    shared_mapping = {}
    opened = []

    def open_store():
        if request.param == "memory":
            store = MappingConfigStore(shared_mapping)
        elif request.param == "desktop":
            store = YamlConfigStore(tmp_path / "user_settings.yaml")
        else:
            store = DuckDBConfigStore(tmp_path / "vess.duckdb")
        opened.append(store)
        return store

    yield open_store
    for store in opened:
        store.close()


class FailingMapping(dict):
    def __setitem__(self, key, value):
        raise OSError("disk full")


def test_default_config_when_nothing_persisted(store_pair):
    store = store_pair()
    config = store.observe().value

    assert config == Config()
    assert config.language == DEFAULT_LANGUAGE
    assert config.name == "" and config.city_state == ""


@pytest.mark.asyncio
async def test_save_then_observe_round_trip(store_pair):
    store = store_pair()
    await store.save(ANA)

    stream = store.observe().subscribe()
    assert await stream.next() == ANA
    stream.close()


@pytest.mark.asyncio
async def test_value_survives_new_store_instance(store_pair):
    first = store_pair()
    await first.save(ANA)
    first.close()

    second = store_pair()
    assert second.observe().value == ANA


@pytest.mark.asyncio
async def test_observers_see_every_write_in_order(store_pair):
    store = store_pair()
    stream = store.observe().subscribe()

    configs = [Config(name=f"evaluator {n}") for n in range(3)]
    for config in configs:
        await store.save(config)

    received = [await stream.next() for _ in range(4)]
    assert received == [Config()] + configs
    stream.close()


@pytest.mark.asyncio
async def test_concurrent_updates_are_serialized_in_call_order(memory_store, preferences):
    service = ConfigService(memory_store)
    seen = []
    service.current_config().listen(seen.append, replay=False)

    configs = [Config(name=f"v{n}") for n in range(5)]
    tasks = [service.update_config(config) for config in configs]
    await asyncio.gather(*tasks)

    assert seen == configs
    assert service.current_config().value == configs[-1]
    assert json.loads(preferences["user_config"])["name"] == "v4"


def test_persisted_layout_uses_camel_case_keys(preferences):
    preferences["user_config"] = json.dumps({"name": "Rui", "cityState": "Lages - SC"})
    config = MappingConfigStore(preferences).observe().value

    assert config.name == "Rui"
    assert config.city_state == "Lages - SC"
    assert config.language == DEFAULT_LANGUAGE
    assert set(config.to_record()) == {"name", "email", "country", "address", "cityState", "language"}


@pytest.mark.parametrize("raw", [
    "{not json",
    "[1, 2, 3]",
    json.dumps({"name": 5}),
    json.dumps("just a string"),
])
def test_corrupted_mapping_record_falls_back_to_default(raw):
    store = MappingConfigStore({"user_config": raw})
    assert store.observe().value == Config()


def test_unknown_fields_are_ignored():
    raw = json.dumps({"name": "Lia", "theme": "dark"})
    assert MappingConfigStore({"user_config": raw}).observe().value == Config(name="Lia")


def test_corrupted_yaml_file_falls_back_to_default(tmp_path):
    path = tmp_path / "user_settings.yaml"
    path.write_text("user_config: {name: [unterminated\n", encoding="utf-8")

    assert YamlConfigStore(path).observe().value == Config()


def test_corrupted_duckdb_record_falls_back_to_default(tmp_path):
    db_path = tmp_path / "vess.duckdb"
    writer = DuckDBConfigStore(db_path)
    writer.conn.execute(
        "INSERT INTO kv_store (key, value) VALUES (?, ?)",
        ["user_config", "%%% definitely not json"],
    )
    writer.close()

    reader = DuckDBConfigStore(db_path)
    try:
        assert reader.observe().value == Config()
    finally:
        reader.close()


@pytest.mark.asyncio
async def test_yaml_store_preserves_other_keys(tmp_path):
    path = tmp_path / "user_settings.yaml"
    path.write_text("window:\n  width: 800\n", encoding="utf-8")
    store = YamlConfigStore(path)

    await store.save(ANA)

    text = path.read_text(encoding="utf-8")
    assert "width: 800" in text
    assert "cityState: Curitiba - PR" in text
    assert YamlConfigStore(path).observe().value == ANA


@pytest.mark.asyncio
async def test_yaml_store_can_save_over_corrupted_file(tmp_path):
    path = tmp_path / "user_settings.yaml"
    path.write_text("::: [", encoding="utf-8")
    store = YamlConfigStore(path)
    assert store.observe().value == Config()

    await store.save(ANA)

    assert YamlConfigStore(path).observe().value == ANA


@pytest.mark.asyncio
async def test_write_failure_raises_and_publishes_nothing():
    store = MappingConfigStore(FailingMapping())
    seen = []
    store.observe().listen(seen.append, replay=False)

    with pytest.raises(PersistenceError):
        await store.save(ANA)

    assert seen == []
    assert store.observe().value == Config()


@pytest.mark.asyncio
async def test_fire_and_forget_update_still_completes(memory_store):
    service = ConfigService(memory_store)
    service.update_config(ANA)

    stream = service.current_config().subscribe()
    assert await stream.next() == Config()
    assert await asyncio.wait_for(stream.next(), timeout=5) == ANA
    stream.close()


@pytest.mark.parametrize("target, expected", [
    ("desktop", YamlConfigStore),
    ("embedded", DuckDBConfigStore),
    ("memory", MappingConfigStore),
    ("MEMORY", MappingConfigStore),
])
def test_factory_selects_backend_per_target(tmp_path, target, expected):
    context = PlatformContext(target=target, data_dir=tmp_path, preferences={})
    store = build_config_store(context, StorageSettings(target=target))
    try:
        assert isinstance(store, expected)
    finally:
        store.close()


def test_factory_uses_settings_filenames_and_key(tmp_path):
    settings = StorageSettings(target="desktop", yaml_filename="profile.yaml", record_key="profile")
    store = build_config_store(PlatformContext(target=TargetType.DESKTOP.value, data_dir=tmp_path), settings)

    assert store.path == tmp_path / "profile.yaml"
    assert store.record_key == "profile"


def test_factory_rejects_unknown_target(tmp_path):
    with pytest.raises(ValueError, match="Unsupported target"):
        build_config_store(PlatformContext(target="watch", data_dir=tmp_path))


def test_memory_target_uses_supplied_preferences():
    preferences = {"user_config": json.dumps({"name": "Bia"})}
    store = build_config_store(PlatformContext(target="memory", preferences=preferences))

    assert store.observe().value.name == "Bia"


@pytest.mark.parametrize("target", ["desktop", "embedded", "memory"])
def test_factory_applies_default_language(tmp_path, target):
    context = PlatformContext(target=target, data_dir=tmp_path, preferences={})
    store = build_config_store(context, StorageSettings(target=target), default_language="English")
    try:
        assert store.observe().value == Config(language="English")
    finally:
        store.close()


def test_record_without_language_takes_default_language():
    preferences = {
        "user_config": json.dumps({"name": "Bia"}),
        "other": json.dumps({"name": "Rui", "language": "Español"}),
    }

    english = Config(language="English")
    assert MappingConfigStore(preferences, default_config=english).observe().value == Config(name="Bia", language="English")
    assert MappingConfigStore(preferences, record_key="other", default_config=english).observe().value.language == "Español"
    assert MappingConfigStore({"user_config": "{oops"}, default_config=english).observe().value == english
