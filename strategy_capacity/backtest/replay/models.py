"""Replay input models.

A replay is a JSON config (ReplayConfig) plus a JSON-lines file with one
ReplayStep per simulated time step, in non-decreasing time order.
"""

# pylint: disable=missing-class-docstring
from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from strategy_capacity.core.capacity.capacity_config import CapacityConfig
from strategy_capacity.core.domain.types import Bar, FillEvent, Resolution, as_utc


class SecurityStateModel(BaseModel):
    invested: bool = False
    delisted: bool = False

    leverage: Decimal = Field(Decimal(1), gt=0)
    reserved_buying_power: Decimal = Field(Decimal(0), ge=0)

    contract_multiplier: Decimal = Field(Decimal(1), gt=0)
    conversion_rate: Decimal = Field(Decimal(1), gt=0)
    resolution: Resolution = "minute"

    model_config = ConfigDict(extra="forbid")


class ReplayStep(BaseModel):
    """State of the world at one simulated time step.

    Securities and bars are sticky: an instrument missing from a step keeps
    its previous state.
    """

    utc_time: datetime
    total_portfolio_value: Decimal

    securities: dict[str, SecurityStateModel] = Field(default_factory=dict)
    bars: dict[str, Bar] = Field(default_factory=dict)
    fills: list[FillEvent] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("utc_time")
    @classmethod
    def normalize_utc_time(cls, value: datetime) -> datetime:
        return as_utc(value)


class ReplayConfig(BaseModel):
    run_id: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime

    capacity: CapacityConfig = Field(default_factory=CapacityConfig)

    model_config = ConfigDict(extra="forbid")

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def validate_horizon(self) -> ReplayConfig:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> ReplayConfig:
        return cls.model_validate(obj)


def load_replay_config(path: str | Path) -> ReplayConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    return ReplayConfig.from_json_obj(json.loads(path.read_text(encoding="utf-8")))


def iter_replay_steps(path: str | Path) -> Iterator[ReplayStep]:
    """Yield ReplaySteps from a JSON-lines file, skipping blank lines."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            yield ReplayStep.model_validate_json(line)
