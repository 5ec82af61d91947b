"""Tests for engine settings persistence."""

import json
from unittest.mock import patch

import pytest
from simulation.settings import EngineSettings, default_settings_path, load_settings, save_settings


class TestEngineSettings:
    def test_defaults(self):
        settings = EngineSettings()
        assert settings.engine == "ngspice"
        assert settings.simulation_timeout == 30.0
        assert settings.command_timeout == 10.0
        assert settings.selected_variable_count == 5

    def test_unknown_engine_rejected(self):
        with pytest.raises(ValueError):
            EngineSettings(engine="spectre")

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValueError):
            EngineSettings(simulation_timeout=0)

    def test_from_dict_ignores_unknown_keys(self):
        settings = EngineSettings.from_dict({"engine": "offline", "colour": "blue"})
        assert settings.engine == "offline"


class TestLoadSave:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "nope.json") == EngineSettings()

    def test_round_trip(self, tmp_path):
        path = tmp_path / "cfg" / "settings.json"
        save_settings(EngineSettings(engine="offline", command_timeout=3.0), path)
        loaded = load_settings(path)
        assert loaded.engine == "offline"
        assert loaded.command_timeout == 3.0

    def test_corrupt_file_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert load_settings(path) == EngineSettings()

    def test_non_object_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps([1, 2]))
        assert load_settings(path) == EngineSettings()

    def test_invalid_values_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"simulation_timeout": -1}))
        assert load_settings(path) == EngineSettings()

    def test_default_path_under_home(self, tmp_path):
        with patch("simulation.settings.Path.home", return_value=tmp_path):
            assert default_settings_path() == tmp_path / ".ngspicex" / "settings.json"
