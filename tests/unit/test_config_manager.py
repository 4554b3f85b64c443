"""
Unit tests for ConfigManager.
"""

import json

import pytest

from simlib.config_manager import ConfigManager, get_config, reload_config


@pytest.mark.unit
class TestConfigManager:

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigManager(str(tmp_path / "missing.json"))
        assert config.get("pointer.inertia") == 0.12
        assert config.get("oven.presets")[0]["name"] == "Baking"

    def test_file_overrides_are_deep_merged(self, temp_config_file):
        temp_config_file.write_text(json.dumps({"oven": {"kp": 8.0}}))
        config = ConfigManager(str(temp_config_file))
        assert config.get("oven.kp") == 8.0
        assert config.get("oven.ki") == 0.5, "Unspecified keys keep their defaults"

    def test_invalid_json_falls_back(self, temp_config_file):
        temp_config_file.write_text("{not json")
        config = ConfigManager(str(temp_config_file))
        assert config.get("simulation.frame_interval_ms") == 16

    def test_get_default(self, tmp_path):
        config = ConfigManager(str(tmp_path / "missing.json"))
        assert config.get("pointer.nope", 42) == 42
        assert config.get("nope.nope") is None

    def test_set(self, tmp_path):
        config = ConfigManager(str(tmp_path / "missing.json"))
        config.set("iir_demo.alpha", 0.5)
        config.set("extra.flag", True)
        assert config.get("iir_demo.alpha") == 0.5
        assert config.get("extra.flag") is True

    def test_section_overrides_do_not_leak(self, tmp_path):
        config = ConfigManager(str(tmp_path / "missing.json"))
        section = config.section("p_controller", {"kp": 3.0, "ranges": {"kp": [1.0, 4.0]}})
        assert section["kp"] == 3.0
        assert section["ranges"] == {"kp": [1.0, 4.0], "mass": [0.0, 1.0]}
        assert config.get("p_controller.kp") == 1.5

    def test_validate_defaults(self, tmp_path):
        valid, errors = ConfigManager(str(tmp_path / "missing.json")).validate_config()
        assert valid, errors

    def test_validate_catches_bad_values(self, tmp_path):
        config = ConfigManager(str(tmp_path / "missing.json"))
        config.set("simulation.dt", 0.0)
        config.set("fir_demo.ranges.taps", [31, 3])
        valid, errors = config.validate_config()
        assert not valid
        assert len(errors) == 2

    def test_reset_to_defaults(self, tmp_path):
        config = ConfigManager(str(tmp_path / "missing.json"))
        config.set("oven.kp", 99.0)
        config.reset_to_defaults()
        assert config.get("oven.kp") == 5.0

    def test_shipped_config_is_valid(self):
        valid, errors = ConfigManager().validate_config()
        assert valid, errors

    def test_get_all_is_a_copy(self, tmp_path):
        config = ConfigManager(str(tmp_path / "missing.json"))
        snapshot = config.get_all()
        snapshot["oven"]["kp"] = -1.0
        assert config.get("oven.kp") == 5.0

    def test_reload_replaces_global_instance(self, temp_config_file):
        try:
            reloaded = reload_config(temp_config_file)
            assert get_config() is reloaded
            assert reloaded.config_file == temp_config_file
        finally:
            reload_config()
