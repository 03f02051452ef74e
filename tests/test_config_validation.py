"""Tests for config validation."""

import pytest

from review_suggest.config import load_config


class TestConfigValidation:
    def test_valid_defaults(self, tmp_path):
        """Default config passes validation without raising."""
        config = load_config(tmp_path / "missing.yaml")
        assert config.llm.timeout == 10.0
        assert config.generator.overall_timeout == 8.0

    @pytest.mark.parametrize(
        ("section", "field", "value"),
        [
            ("llm", "temperature", 1.5),
            ("llm", "timeout", 0),
            ("generator", "max_attempts", 0),
            ("generator", "max_attempts", 9),
            ("generator", "overall_timeout", 0),
            ("generator", "default_tone", "grumpy"),
            ("rate_limit", "max_per_minute", 0),
            ("rate_limit", "max_per_hour", 0),
            ("dedup", "max_entries_per_key", 0),
        ],
    )
    def test_invalid_value_names_field(self, tmp_path, section, field, value):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text(f"{section}:\n  {field}: {value}\n")
        with pytest.raises(ValueError, match=field):
            load_config(yaml)

    def test_unknown_key_rejected(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("rate_limit:\n  per_day: 5\n")
        with pytest.raises(TypeError):
            load_config(yaml)
