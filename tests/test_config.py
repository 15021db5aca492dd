"""Tests for config loading."""

import pytest

from writing_annotator.config import AppConfig, CacheConfig, LLMConfig, load_config


class TestConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.llm.model == "claude-haiku-4-5-20251001"
        assert config.analysis.analyzer_timeout == 60.0
        assert "spelling" in config.analysis.analyzers
        assert config.cache.ttl_days == 7

    def test_load_config_defaults(self, tmp_path):
        """Loading from non-existent path returns defaults."""
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config.llm.max_retries == 3

    def test_load_config_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            "llm:\n  model: test-model\nanalysis:\n  analyzers: [spelling, grammar]\n"
        )
        config = load_config(yaml_path)
        assert config.llm.model == "test-model"
        assert config.analysis.analyzers == ("spelling", "grammar")
        # Defaults for unspecified
        assert config.usage.enabled is True

    def test_cache_resolved_path(self):
        cache = CacheConfig(db_path="~/test.db")
        assert "~" not in str(cache.resolved_db_path)

    def test_frozen_config(self):
        config = LLMConfig()
        with pytest.raises(AttributeError):
            config.model = "changed"
