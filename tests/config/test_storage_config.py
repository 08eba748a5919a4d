"""Tests for configuration loading and the config-to-kernel bridge."""

import pytest

from storage_config import DATABASE_URL_ENV, get_active_config
from storage_config.bridges import build_placement_engine
from storage_config.loader import compute_checksum, load_yaml_file, parse_config
from storage_kernel.db.engine import create_tables, is_sqlite, reset_engine
from storage_kernel.domain.dtos import LocationInput
from storage_kernel.services.placement_engine import PlacementEngine


@pytest.fixture
def no_env_override(monkeypatch):
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)


def _write(tmp_path, text):
    path = tmp_path / "set.yaml"
    path.write_text(text)
    return path


class TestGetActiveConfig:
    def test_default_set(self, no_env_override):
        config = get_active_config()
        assert config.name == "default"
        assert config.database.url == "sqlite:///storelight.db"
        assert config.database.pool_size == 20
        assert config.logging.level == "INFO"
        assert len(config.checksum) == 64

    def test_env_overrides_url(self, monkeypatch, no_env_override):
        default = get_active_config()
        monkeypatch.setenv(DATABASE_URL_ENV, "postgresql://lab@db/storage")
        config = get_active_config()
        assert config.database.url == "postgresql://lab@db/storage"
        assert config.checksum != default.checksum

    def test_custom_file_defaults(self, tmp_path, no_env_override):
        path = _write(tmp_path, "database:\n  url: sqlite://\n")
        config = get_active_config(path)
        assert config.name == "default"
        assert config.database.echo is False
        assert config.database.pool_timeout == 30

    def test_load_logged(self, no_env_override, captured_logs):
        config = get_active_config()
        loaded = [r for r in captured_logs() if r["message"] == "storage_config_loaded"]
        assert loaded[0]["checksum"] == config.checksum
        assert loaded[0]["config_name"] == "default"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")


class TestParseConfig:
    def test_missing_database_section(self):
        with pytest.raises(KeyError):
            parse_config({"name": "x"})

    def test_missing_url(self):
        with pytest.raises(KeyError):
            parse_config({"database": {"echo": True}})

    @pytest.mark.parametrize(
        "data",
        [
            {"database": {"url": "  "}},
            {"database": {"url": "sqlite://", "echo": "yes"}},
            {"database": {"url": "sqlite://", "pool_size": -1}},
            {"database": {"url": "sqlite://", "pool_size": True}},
            {"database": {"url": "sqlite://"}, "logging": {"level": "LOUD"}},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(ValueError):
            parse_config(data)

    def test_level_normalised(self):
        assert parse_config({"database": {"url": "sqlite://"}, "logging": {"level": "debug"}}).logging.level == "DEBUG"


class TestLoader:
    def test_empty_yaml_is_empty_dict(self, tmp_path):
        assert load_yaml_file(_write(tmp_path, "")) == {}

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": [1, 2]}) == compute_checksum({"b": [1, 2], "a": 1})
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})


class TestBuildPlacementEngine:
    def test_wires_a_working_engine(self, context):
        config = parse_config({"database": {"url": "sqlite://"}})
        try:
            engine = build_placement_engine(config)
            assert isinstance(engine, PlacementEngine)
            assert is_sqlite()
            create_tables()
            info = engine.create_location(context, LocationInput(name="Root"))
            assert info.barcode == "STO-001F"
        finally:
            reset_engine()
