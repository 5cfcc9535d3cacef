# tests/test_config.py
from pathlib import Path

import pytest

from colonysim_core.config import ConfigParsingError, EngineConfig, load_engine_config


# === Group 1: Mappings ===

def test_defaults_are_applied(tmp_path):
    config = load_engine_config({"reference_db": str(tmp_path / "sde.sqlite")})
    assert config == EngineConfig(reference_db=tmp_path / "sde.sqlite")
    assert config.log_level == "INFO"
    assert config.expiring_soon_hours == 1.0
    assert config.max_workers == 4


def test_log_level_is_case_insensitive(tmp_path):
    config = load_engine_config({"reference_db": str(tmp_path / "sde.sqlite"), "log_level": "debug"})
    assert config.log_level == "DEBUG"


def test_relative_path_in_mapping_resolves_against_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = load_engine_config({"reference_db": "data/sde.sqlite"})
    assert config.reference_db == Path.cwd() / "data" / "sde.sqlite"


@pytest.mark.parametrize("raw, field", [
    ({}, "reference_db"),
    ({"reference_db": ""}, "reference_db"),
    ({"reference_db": "a.sqlite", "log_level": "LOUD"}, "log_level"),
    ({"reference_db": "a.sqlite", "max_workers": 0}, "max_workers"),
    ({"reference_db": "a.sqlite", "expiring_soon_hours": -1}, "expiring_soon_hours"),
    ({"reference_db": "a.sqlite", "colour": "blue"}, "colour"),
])
def test_invalid_mappings(raw, field):
    with pytest.raises(ConfigParsingError, match=field):
        load_engine_config(raw)


# === Group 2: Files ===

def test_file_with_relative_database_path(tmp_path):
    config_dir = tmp_path / "conf"
    config_dir.mkdir()
    config_file = config_dir / "engine.yaml"
    config_file.write_text(
        "reference_db: ../sde.sqlite\n"
        "log_level: warning\n"
        "expiring_soon_hours: 6\n"
        "max_workers: 2\n"
    )

    config = load_engine_config(config_file)

    assert config.reference_db == config_dir.resolve() / ".." / "sde.sqlite"
    assert config.log_level == "WARNING"
    assert config.expiring_soon_hours == 6.0
    assert config.max_workers == 2


def test_missing_file(tmp_path):
    with pytest.raises(ConfigParsingError, match="not found"):
        load_engine_config(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    config_file = tmp_path / "engine.yaml"
    config_file.write_text("reference_db: [unclosed\n")
    with pytest.raises(ConfigParsingError, match="Invalid YAML"):
        load_engine_config(config_file)


def test_non_mapping_root(tmp_path):
    config_file = tmp_path / "engine.yaml"
    config_file.write_text("- just\n- a list\n")
    with pytest.raises(ConfigParsingError, match="must be a mapping"):
        load_engine_config(config_file)
