"""Configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

MAX_MONTHS = 12000


@dataclass
class Config:
    """Settings for building reply-prediction datasets."""

    your_email: str | None = None
    train_size: int = 1500
    validation_size: int = 1500
    test_size: int = 500
    months: int = 0  # 0 = whole history
    ground_truth_days: int = 20
    random_seed: int = 100
    feature_set: str = "initial"

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> Config:
        """Load configuration from environment and .env file.

        Args:
            env_file: Optional path to a .env file. Environment variables
                override values found in the file.

        Returns:
            Config instance with loaded values.

        Raises:
            ValueError: If a numeric setting is not an integer.
        """
        config: dict[str, Any] = {}
        if env_file and env_file.exists():
            config = dict(dotenv_values(env_file))

        def lookup(name: str) -> str | None:
            return os.environ.get(name) or config.get(name)

        def lookup_int(name: str, default: int) -> int:
            raw = lookup(name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ValueError(f"{name} must be an integer, got {raw!r}") from e

        return cls(
            your_email=lookup("YOUR_EMAIL"),
            train_size=lookup_int("TRAIN_SET_SIZE", 1500),
            validation_size=lookup_int("VALIDATION_SET_SIZE", 1500),
            test_size=lookup_int("TEST_SET_SIZE", 500),
            months=min(lookup_int("MONTHS", 0), MAX_MONTHS),
            ground_truth_days=lookup_int("GROUND_TRUTH_DAYS", 20),
            random_seed=lookup_int("RANDOM_SEED", 100),
            feature_set=(lookup("FEATURE_SET") or "initial").lower(),
        )

    def validate(self) -> list[str]:
        """Validate configuration.

        Returns:
            List of problems found, empty when the config is usable.
        """
        from inbox_reply.features.feature_set import FeatureSetType

        problems = []
        for name in ("train_size", "validation_size", "test_size", "months", "ground_truth_days"):
            if getattr(self, name) < 0:
                problems.append(f"{name} must not be negative")
        if self.train_size + self.validation_size + self.test_size == 0:
            problems.append("at least one partition size must be positive")
        if self.feature_set not in {t.value for t in FeatureSetType}:
            problems.append(f"unknown feature set: {self.feature_set}")
        return problems

    @property
    def desired_total(self) -> int:
        """Total number of messages requested across all partitions."""
        return self.train_size + self.validation_size + self.test_size

    def with_sizes(self, train: int, validation: int, test: int) -> Config:
        """Create a new config with different partition sizes."""
        from dataclasses import replace

        return replace(self, train_size=train, validation_size=validation, test_size=test)
