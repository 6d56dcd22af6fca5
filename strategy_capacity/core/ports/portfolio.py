"""Portfolio and security views consumed by the capacity layer.

These protocols are the only window the aggregator has onto portfolio
valuation and margin. Implementations own the numbers; the capacity layer
only reads them at settlement time.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from strategy_capacity.core.domain.types import Resolution


class SecurityView(Protocol):
    """Live per-instrument state."""

    @property
    def instrument(self) -> str:
        """Instrument identifier."""

    @property
    def is_delisted(self) -> bool:
        """True once the security can no longer be traded."""

    @property
    def invested(self) -> bool:
        """True while the portfolio holds an open position."""

    @property
    def leverage(self) -> Decimal:
        """Leverage applied to the position."""

    @property
    def contract_multiplier(self) -> Decimal:
        """Contract multiplier (1 for cash equities)."""

    @property
    def conversion_rate(self) -> Decimal:
        """Quote currency to account currency conversion rate."""

    @property
    def resolution(self) -> Resolution:
        """Highest data resolution subscribed for the security."""

    def reserved_buying_power(self) -> Decimal:
        """Absolute buying power reserved for the current position."""


class PortfolioView(Protocol):
    """Portfolio valuation and security lookup."""

    def total_portfolio_value(self) -> Decimal:
        """Total portfolio value in account currency."""

    def security(self, instrument: str) -> SecurityView:
        """Return the live security view for ``instrument``."""
