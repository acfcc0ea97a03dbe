"""Tests for inbox_reply.core.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from inbox_reply.core.config import MAX_MONTHS, Config

ENV_NAMES = (
    "YOUR_EMAIL",
    "TRAIN_SET_SIZE",
    "VALIDATION_SET_SIZE",
    "TEST_SET_SIZE",
    "MONTHS",
    "GROUND_TRUTH_DAYS",
    "RANDOM_SEED",
    "FEATURE_SET",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove any settings inherited from the real environment."""
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Tests for Config class."""

    def test_defaults(self) -> None:
        """Test loading config with nothing set."""
        config = Config.from_env()

        assert config.your_email is None
        assert config.train_size == 1500
        assert config.validation_size == 1500
        assert config.test_size == 500
        assert config.months == 0
        assert config.ground_truth_days == 20
        assert config.random_seed == 100
        assert config.feature_set == "initial"

    def test_from_env_with_all_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading config with all values set."""
        monkeypatch.setenv("YOUR_EMAIL", "me@example.com")
        monkeypatch.setenv("TRAIN_SET_SIZE", "10")
        monkeypatch.setenv("VALIDATION_SET_SIZE", "5")
        monkeypatch.setenv("TEST_SET_SIZE", "3")
        monkeypatch.setenv("MONTHS", "6")
        monkeypatch.setenv("GROUND_TRUTH_DAYS", "7")
        monkeypatch.setenv("RANDOM_SEED", "42")
        monkeypatch.setenv("FEATURE_SET", "With_Recipient")

        config = Config.from_env()

        assert config.your_email == "me@example.com"
        assert (config.train_size, config.validation_size, config.test_size) == (10, 5, 3)
        assert config.months == 6
        assert config.ground_truth_days == 7
        assert config.random_seed == 42
        assert config.feature_set == "with_recipient"

    def test_months_capped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that very long history windows are capped."""
        monkeypatch.setenv("MONTHS", "999999")
        assert Config.from_env().months == MAX_MONTHS

    def test_non_integer_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that unparseable sizes raise ValueError."""
        monkeypatch.setenv("TRAIN_SET_SIZE", "lots")

        with pytest.raises(ValueError, match="TRAIN_SET_SIZE must be an integer"):
            Config.from_env()

    def test_from_env_with_env_file(self, tmp_path: Path) -> None:
        """Test loading config from .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("YOUR_EMAIL=file@example.com\nTEST_SET_SIZE=12\n")

        config = Config.from_env(env_file=env_file)

        assert config.your_email == "file@example.com"
        assert config.test_size == 12

    def test_env_overrides_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test that environment variables override .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("YOUR_EMAIL=file@example.com\n")
        monkeypatch.setenv("YOUR_EMAIL", "env@example.com")

        config = Config.from_env(env_file=env_file)

        assert config.your_email == "env@example.com"

    def test_missing_env_file_ignored(self, tmp_path: Path) -> None:
        """Test that a nonexistent .env path falls back to defaults."""
        config = Config.from_env(env_file=tmp_path / "missing.env")
        assert config.train_size == 1500


class TestConfigValidate:
    """Tests for Config.validate."""

    def test_valid_config(self) -> None:
        assert Config().validate() == []

    def test_negative_size(self) -> None:
        problems = Config(test_size=-1).validate()
        assert problems == ["test_size must not be negative"]

    def test_all_sizes_zero(self) -> None:
        problems = Config(train_size=0, validation_size=0, test_size=0).validate()
        assert "at least one partition size must be positive" in problems

    def test_unknown_feature_set(self) -> None:
        problems = Config(feature_set="everything").validate()
        assert problems == ["unknown feature set: everything"]


class TestConfigSizes:
    """Tests for partition size helpers."""

    def test_desired_total(self) -> None:
        assert Config(train_size=3, validation_size=2, test_size=1).desired_total == 6

    def test_with_sizes(self) -> None:
        config = Config(your_email="me@example.com")
        resized = config.with_sizes(1, 2, 3)

        assert (resized.train_size, resized.validation_size, resized.test_size) == (1, 2, 3)
        assert resized.your_email == "me@example.com"
        assert config.train_size == 1500
