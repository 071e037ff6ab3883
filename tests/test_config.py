"""Tests for configuration loading."""

import pytest


class TestLoadConfig:
    """Test suite for load_config and merge_configs."""

    def test_defaults(self):
        """Test the packaged defaults load."""
        from safenc.utils.config import load_config

        config = load_config()
        assert config["file"]["format"] == "NETCDF4"
        assert config["file"]["fill"] is True
        assert config["chunk_cache"]["size"] is None

    def test_user_file_overrides(self, tmp_path):
        """Test a user file overrides only the keys it names."""
        from safenc.utils.config import load_config

        path = tmp_path / "user.yml"
        path.write_text("file:\n  fill: false\nchunk_cache:\n  size: 1048576\n")

        config = load_config(path)
        assert config["file"]["fill"] is False
        assert config["file"]["format"] == "NETCDF4"
        assert config["chunk_cache"]["size"] == 1048576
        assert config["chunk_cache"]["nelems"] is None

    def test_missing_file(self, tmp_path):
        """Test a missing user file raises ConfigError."""
        from safenc.utils.config import load_config
        from safenc.utils.exceptions import ConfigError

        with pytest.raises(ConfigError):
            load_config(tmp_path / "absent.yml")

    def test_not_a_mapping(self, tmp_path):
        """Test a YAML list is rejected."""
        from safenc.utils.config import load_config
        from safenc.utils.exceptions import ConfigError

        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_merge_is_recursive(self):
        """Test nested mappings merge instead of replacing."""
        from safenc.utils.config import merge_configs

        base = {"a": {"b": 1, "c": 2}, "d": 3}
        merged = merge_configs(base, {"a": {"c": 5}, "e": 6})
        assert merged == {"a": {"b": 1, "c": 5}, "d": 3, "e": 6}
        assert base["a"]["c"] == 2

    def test_save_and_reload(self, tmp_path):
        """Test a saved configuration loads back over the defaults."""
        from safenc.utils.config import load_config, save_config

        path = tmp_path / "saved.yml"
        save_config({"file": {"format": "NETCDF4_CLASSIC"}}, path)
        assert load_config(path)["file"]["format"] == "NETCDF4_CLASSIC"


class TestLogging:
    """Test suite for logging helpers."""

    def test_namespace(self):
        """Test module loggers live under the package logger."""
        from safenc.utils.logging import get_logger

        assert get_logger("file").name == "safenc.file"

    def test_setup_writes_file(self, tmp_path):
        """Test setup_logging attaches a file handler."""
        import logging

        from safenc.utils.logging import get_logger, setup_logging

        log_file = tmp_path / "safenc.log"
        root = logging.getLogger("safenc")
        before = list(root.handlers)
        setup_logging(logging.DEBUG, str(log_file))
        try:
            get_logger("test").debug("hello log")
            for handler in root.handlers:
                handler.flush()
            assert "hello log" in log_file.read_text()
        finally:
            for handler in root.handlers[len(before):]:
                handler.close()
                root.removeHandler(handler)
