"""Unit tests for ConfigManager — defaults, file merge and validation."""

from __future__ import annotations

import json

import pytest

from headtracker.config_manager import DEFAULT_CONFIG, ConfigManager, load_config_file


@pytest.mark.unit
class TestDefaults:

    def test_reference_values(self, tmp_path):
        config = ConfigManager(str(tmp_path / "none.json"))
        assert config.get("model.input_width") == 640
        assert config.get("model.input_height") == 640
        assert config.get("tracking.frame_skip") == 2
        assert config.get("tracking.confidence_threshold") == 0.4
        assert config.get("tracking.mirror_output") is True
        assert config.validate_config()

    def test_defaults_not_shared(self):
        config = ConfigManager(load_file=False)
        config.set("tracking.frame_skip", 5)
        assert DEFAULT_CONFIG["tracking"]["frame_skip"] == 2

    def test_missing_key_default(self):
        config = ConfigManager(load_file=False)
        assert config.get("tracking.nope", "fallback") == "fallback"
        assert config.get("model.path.deeper") is None

    def test_set_creates_sections(self):
        config = ConfigManager(load_file=False)
        config.set("extra.nested.value", 3)
        assert config.get("extra.nested.value") == 3

    def test_overrides_applied(self):
        config = ConfigManager(load_file=False, overrides={"tracking": {"frame_skip": 4}})
        assert config.get("tracking.frame_skip") == 4
        assert config.get("tracking.confidence_threshold") == 0.4


@pytest.mark.unit
class TestFileHandling:

    def test_deep_merge_from_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tracking": {"mirror_output": False}, "camera": {"source": "clip.mp4"}}))
        config = ConfigManager(str(path))
        assert config.get("tracking.mirror_output") is False
        assert config.get("tracking.frame_skip") == 2
        assert config.get("camera.source") == "clip.mp4"

    def test_invalid_json_keeps_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        config = ConfigManager(str(path))
        assert config.load_config() is False
        assert config.get("tracking.frame_skip") == 2

    def test_non_object_file_rejected(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]")
        assert load_config_file(str(path)) is None

    def test_save_writes_backup(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tracking": {"frame_skip": 3}}))
        config = ConfigManager(str(path))
        config.set("tracking.frame_skip", 4)
        assert config.save_config()

        assert json.loads(path.read_text())["tracking"]["frame_skip"] == 4
        backups = list(tmp_path.glob("config.json.backup.*"))
        assert len(backups) == 1
        assert json.loads(backups[0].read_text())["tracking"]["frame_skip"] == 3


@pytest.mark.unit
class TestValidation:

    @pytest.mark.parametrize(
        "key, value",
        [
            ("model.input_width", 0),
            ("model.input_height", "640"),
            ("model.backend", "tensorrt"),
            ("model.path", ""),
            ("tracking.confidence_threshold", 1.5),
            ("tracking.initial_position", -0.1),
            ("tracking.frame_skip", 0),
            ("tracking.frame_skip", True),
            ("preprocessing.source_channel_order", "YUV"),
            ("preprocessing.interpolation", "cubic"),
        ],
    )
    def test_invalid_values_reported(self, key, value):
        config = ConfigManager(load_file=False)
        config.set(key, value)
        errors = config.validation_errors()
        assert any(key in error for error in errors)
        assert config.validate_config() is False
