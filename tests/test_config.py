"""
Unit tests for configuration loading and validation.
"""

import os
import tempfile
from pathlib import Path

import pytest
import yaml

from costoflife.config.loader import (
    DEFAULT_LOG_FILENAME,
    AppConfig,
    default_config,
    load_config,
)
from costoflife.storage.ledger import DEFAULT_SEARCH_THRESHOLD


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def test_valid_config_loads_correctly(self):
        """Test that a valid configuration loads correctly."""
        config_path = self._write_config({
            "data_dir": self.temp_dir,
            "log_filename": "expenses.txt",
            "search_threshold": 80
        })
        config = load_config(config_path)

        assert config.data_dir == Path(self.temp_dir)
        assert config.log_filename == "expenses.txt"
        assert config.search_threshold == 80
        assert config.ledger_path == Path(self.temp_dir) / "expenses.txt"

    def test_partial_config_uses_defaults(self):
        """Test that missing keys keep their defaults."""
        config_path = self._write_config({"data_dir": self.temp_dir})
        config = load_config(config_path)

        assert config.log_filename == DEFAULT_LOG_FILENAME
        assert config.search_threshold == DEFAULT_SEARCH_THRESHOLD

    def test_empty_file_gives_defaults(self):
        """Test that an empty file is a default configuration."""
        config_path = os.path.join(self.temp_dir, "config.yaml")
        Path(config_path).write_text("", encoding="utf-8")

        assert load_config(config_path) == default_config()

    def test_home_is_expanded(self):
        """Test that ~ in data_dir is expanded."""
        config_path = self._write_config({"data_dir": "~/costoflife"})
        config = load_config(config_path)

        assert config.data_dir == Path.home() / "costoflife"

    def test_missing_file_raises_error(self):
        """Test that a missing config file is reported."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(os.path.join(self.temp_dir, "missing.yaml"))

    def test_invalid_yaml_raises_error(self):
        """Test that broken YAML is reported."""
        config_path = os.path.join(self.temp_dir, "config.yaml")
        Path(config_path).write_text("data_dir: [unclosed", encoding="utf-8")

        with pytest.raises(yaml.YAMLError):
            load_config(config_path)

    def test_unknown_keys_raise_error(self):
        """Test that unknown keys are rejected."""
        config_path = self._write_config({"data_dir": self.temp_dir, "currency": "USD"})

        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_config(config_path)

    def test_non_mapping_raises_error(self):
        """Test that the top level must be a dictionary."""
        config_path = self._write_config(["data_dir"])

        with pytest.raises(ValueError, match="must be a dictionary"):
            load_config(config_path)

    @pytest.mark.parametrize("threshold", ["high", 1.5, True, -1, 101])
    def test_invalid_threshold_raises_error(self, threshold):
        """Test that the threshold must be an integer between 0 and 100."""
        config_path = self._write_config({"search_threshold": threshold})

        with pytest.raises(ValueError, match="search_threshold"):
            load_config(config_path)

    @pytest.mark.parametrize("filename", ["", "   ", 42, "dir/ledger.txt"])
    def test_invalid_log_filename_raises_error(self, filename):
        """Test that the ledger file name must be a plain file name."""
        config_path = self._write_config({"log_filename": filename})

        with pytest.raises(ValueError, match="log_filename"):
            load_config(config_path)


class TestAppConfig:
    """Test AppConfig validation."""

    def test_defaults(self):
        """Test default values."""
        config = AppConfig(data_dir=Path("/tmp/costoflife"))
        assert config.ledger_path == Path("/tmp/costoflife") / DEFAULT_LOG_FILENAME
        assert config.search_threshold == DEFAULT_SEARCH_THRESHOLD

    def test_default_data_dir(self):
        """Test that the data dir defaults to the application dir."""
        assert "costoflife" in str(default_config().data_dir).lower()
