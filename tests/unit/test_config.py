"""Unit tests for settings."""

import pytest
from pydantic import ValidationError

from golfsearch.config import Settings


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GOLFSEARCH_MAX_LENGTH", raising=False)
        config = Settings(_env_file=None)
        assert config.max_length == 1000
        assert config.language == "c"
        assert config.alphabet == "default"
        assert config.work_dir == "/tmp"
        assert not config.stop_on_first_mismatch

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("GOLFSEARCH_MAX_LENGTH", "7")
        monkeypatch.setenv("GOLFSEARCH_TIMEOUT_SECONDS", "0.25")
        config = Settings(_env_file=None)
        assert config.max_length == 7
        assert config.timeout_seconds == 0.25

    def test_command_from_environment(self, monkeypatch):
        monkeypatch.setenv("GOLFSEARCH_COMPILE_COMMAND", '["tcc", "{source}", "-o", "{artifact}"]')
        config = Settings(_env_file=None)
        assert config.compile_command == ["tcc", "{source}", "-o", "{artifact}"]

    def test_negative_length_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_length=-1)

    def test_zero_timeout_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, timeout_seconds=0)

    def test_language_normalized(self):
        assert Settings(_env_file=None, language=" CPP ").language == "cpp"
