from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from strategy_capacity.core.domain.types import Bar


class MarketDataView(Protocol):
    """Read-only access to the most recent market bar per instrument."""

    def latest_bar(self, instrument: str) -> Bar | None:
        """Return the latest bar for ``instrument`` or None if there is none."""
