"""Tests for oaiharvest.config."""

from __future__ import annotations

from oaiharvest.config import AppConfig, load_config, write_default_config
from oaiharvest.formats.base import DateRange


class TestDefaults:
    def test_default_config_values(self):
        config = AppConfig()
        assert config.client.base_url == ""
        assert config.client.timeout == 30.0
        assert config.harvest.metadata_prefix == "oai_dc"
        assert config.harvest.max_pages == 0
        assert config.log_level == "INFO"

    def test_no_date_range_by_default(self):
        assert AppConfig().date_range() is None


class TestLoadConfig:
    def test_load_missing_file(self, tmp_path):
        config = load_config(tmp_path / "nonexistent.toml")
        assert config.harvest.metadata_prefix == "oai_dc"

    def test_load_valid_config(self, tmp_path):
        cfg = tmp_path / "config.toml"
        cfg.write_text("""\
[general]
log_level = "DEBUG"

[client]
base_url = "https://opac.example.org/oai"
timeout = 10.0
user_agent = "my-harvester/1.0"

[harvest]
metadata_prefix = "marcxml"
from_date = "2024-01-01"
max_pages = 5
unknown_key = "ignored"
""")
        config = load_config(cfg)
        assert config.log_level == "DEBUG"
        assert config.client.base_url == "https://opac.example.org/oai"
        assert config.client.timeout == 10.0
        assert config.client.user_agent == "my-harvester/1.0"
        assert config.harvest.metadata_prefix == "marcxml"
        assert config.harvest.max_pages == 5
        assert not hasattr(config.harvest, "unknown_key")
        assert config.date_range() == DateRange("2024-01-01", "")


class TestWriteDefault:
    def test_creates_config_file(self, tmp_path):
        path = write_default_config(tmp_path / "config.toml")
        assert path.exists()
        text = path.read_text()
        assert "[client]" in text
        assert "[harvest]" in text

    def test_default_file_loads(self, tmp_path):
        path = write_default_config(tmp_path / "config.toml")
        config = load_config(path)
        assert config.harvest.metadata_prefix == "oai_dc"
        assert config.client.timeout == 30.0

    def test_does_not_overwrite(self, tmp_path):
        cfg = tmp_path / "config.toml"
        cfg.write_text("custom")
        write_default_config(cfg)
        assert cfg.read_text() == "custom"
