"""Capacity configuration model."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from strategy_capacity.core.domain.types import Resolution


class ResolutionProfile(BaseModel):
    """Liquidity modelling parameters for one data resolution.

    participation_rate: share of each bar's dollar volume the strategy could
        have taken without moving the market.
    timeout_seconds: time after the last fill at which the measurement
        window of an instrument closes.
    """

    participation_rate: Decimal = Field(..., gt=0, le=1)
    timeout_seconds: float = Field(..., gt=0)

    model_config = ConfigDict(extra="forbid")

    @property
    def timeout(self) -> timedelta:
        return timedelta(seconds=self.timeout_seconds)


def _default_profiles() -> dict[str, ResolutionProfile]:
    return {
        "tick": ResolutionProfile(participation_rate=Decimal("0.50"), timeout_seconds=60),
        "second": ResolutionProfile(participation_rate=Decimal("0.50"), timeout_seconds=60),
        "minute": ResolutionProfile(participation_rate=Decimal("0.20"), timeout_seconds=5 * 60),
        "hour": ResolutionProfile(participation_rate=Decimal("0.05"), timeout_seconds=60 * 60),
        "daily": ResolutionProfile(participation_rate=Decimal("0.02"), timeout_seconds=24 * 60 * 60),
    }


class CapacityConfig(BaseModel):
    """Structured capacity estimation configuration.

    JSON example:
        "capacity": {
          "max_snapshot_days": 7,
          "smoothing_new_weight": "0.33",
          "resolution_profiles": {"minute": {"participation_rate": "0.2", "timeout_seconds": 300}}
        }

    Profiles given in JSON replace the defaults for their resolution only.
    """

    min_snapshot_days: float = Field(1.0, gt=0)
    max_snapshot_days: float = Field(7.0, gt=0)

    # Bottleneck smoothing: smoothed = new_weight * new + prior_weight * smoothed
    smoothing_new_weight: Decimal = Field(Decimal("0.33"), ge=0, le=1)
    smoothing_prior_weight: Decimal = Field(Decimal("0.66"), ge=0, le=1)

    # Trading minutes per day used to damp volume captured by fast strategies.
    fast_trading_minutes: Decimal = Field(Decimal(390), gt=0)

    default_resolution: Resolution = "minute"
    resolution_profiles: dict[Resolution, ResolutionProfile] = Field(default_factory=_default_profiles)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, capacity_obj: dict[str, Any]) -> CapacityConfig:
        """Create a CapacityConfig instance from a JSON-compatible object."""
        return cls.model_validate(capacity_obj)

    @model_validator(mode="after")
    def validate_consistency(self) -> CapacityConfig:
        """Validate internal consistency and fill in missing profiles."""
        if self.min_snapshot_days > self.max_snapshot_days:
            raise ValueError("min_snapshot_days must not exceed max_snapshot_days")
        if self.smoothing_new_weight + self.smoothing_prior_weight > 1:
            raise ValueError("smoothing weights must not sum above 1")

        merged = _default_profiles()
        merged.update(self.resolution_profiles)
        self.resolution_profiles = merged
        return self

    def profile_for(self, resolution: str | None) -> ResolutionProfile:
        """Return the profile for ``resolution``, falling back to the default resolution."""
        if resolution in self.resolution_profiles:
            return self.resolution_profiles[resolution]
        return self.resolution_profiles[self.default_resolution]
