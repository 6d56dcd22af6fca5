"""Decaying bottleneck statistics kept per instrument."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

DEFAULT_NEW_WEIGHT = Decimal("0.33")
DEFAULT_PRIOR_WEIGHT = Decimal("0.66")


@dataclass(slots=True)
class SmoothedExtremum:
    """How often, and at what smoothed capacity, an instrument was the bottleneck.

    The smoothed value starts at zero, so the first observation only moves it
    a third of the way toward the observed capacity.
    """

    occurrence_count: int = 0
    smoothed_value: Decimal = Decimal(0)

    new_weight: Decimal = DEFAULT_NEW_WEIGHT
    prior_weight: Decimal = DEFAULT_PRIOR_WEIGHT

    def update(self, capacity: Decimal) -> None:
        self.occurrence_count += 1
        self.smoothed_value = (self.new_weight * capacity) + (self.smoothed_value * self.prior_weight)

    def __str__(self) -> str:
        return f"{self.occurrence_count} : {self.smoothed_value:.2f}"
