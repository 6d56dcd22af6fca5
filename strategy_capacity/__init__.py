"""Public API for the strategy_capacity package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Replay API
# ----------------------------------------------------------------------
from strategy_capacity.backtest.replay.models import ReplayConfig, ReplayStep, SecurityStateModel
from strategy_capacity.backtest.replay.runner import CapacityReplayRunner
from strategy_capacity.backtest.report.summary import CapacitySummary, summarize_capacity

# ----------------------------------------------------------------------
# Capacity engine
# ----------------------------------------------------------------------
from strategy_capacity.core.capacity.aggregator import CapacityAggregator
from strategy_capacity.core.capacity.capacity_config import CapacityConfig, ResolutionProfile
from strategy_capacity.core.capacity.liquidity import (
    BarVolumeLiquidityTracker,
    bar_volume_tracker_factory,
)
from strategy_capacity.core.domain.smoothed_extremum import SmoothedExtremum

# ----------------------------------------------------------------------
# Domain types
# ----------------------------------------------------------------------
from strategy_capacity.core.domain.types import Bar, FillEvent, Price, Quantity

# ----------------------------------------------------------------------
# Ports (implemented by the host system)
# ----------------------------------------------------------------------
from strategy_capacity.core.ports.clock import SimulationClock
from strategy_capacity.core.ports.liquidity_tracker import LiquidityTracker, LiquidityTrackerFactory
from strategy_capacity.core.ports.market_data import MarketDataView
from strategy_capacity.core.ports.portfolio import PortfolioView, SecurityView

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Engine
    "CapacityAggregator",
    "CapacityConfig",
    "ResolutionProfile",
    "SmoothedExtremum",
    "BarVolumeLiquidityTracker",
    "bar_volume_tracker_factory",

    # Domain
    "FillEvent",
    "Bar",
    "Price",
    "Quantity",

    # Ports
    "SimulationClock",
    "PortfolioView",
    "SecurityView",
    "MarketDataView",
    "LiquidityTracker",
    "LiquidityTrackerFactory",

    # Replay
    "CapacityReplayRunner",
    "ReplayConfig",
    "ReplayStep",
    "SecurityStateModel",
    "CapacitySummary",
    "summarize_capacity",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("strategy-capacity")
except PackageNotFoundError:
    __version__ = "0.0.0"
