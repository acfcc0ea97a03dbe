"""Values that carry a confidence."""

from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Uncertain:
    """A value together with the probability that it is correct.

    Equality and hashing consider only the value, so two readings of the
    same name with different confidence compare equal.
    """

    value: str | None = None
    probability: float = field(default=1.0, compare=False)

    @classmethod
    def from_prob(cls, value: str | None, probability: float) -> Uncertain:
        """Create an uncertain value with the given confidence."""
        return cls(value=value, probability=probability)

    @property
    def is_certain(self) -> bool:
        """Whether the value is known with probability one."""
        return math.isclose(self.probability, 1.0)

    def __str__(self) -> str:
        if self.probability == 0.0 or self.value is None:
            return ""
        return self.value if self.is_certain else f"{self.value}?"
