"""
Order status vocabulary used by fill events.

Only executions change how much liquidity a strategy consumed, so the
capacity layer reacts to a small subset of the order lifecycle. This module
is passive: it names the states and answers membership questions, it never
validates transitions or raises.
"""

from __future__ import annotations

from typing import Literal

OrderStatus = Literal[
    "pending_new",
    "accepted",
    "working",
    "partially_filled",
    "filled",
    "canceled",
    "expired",
    "rejected",
    "replaced",
]


# Statuses carrying an execution: these are the only ones forwarded to
# liquidity trackers.
FILL_STATUSES: frozenset[str] = frozenset(
    {
        "partially_filled",
        "filled",
    }
)


def is_fill_status(status: str) -> bool:
    """Return True if the status reports an execution."""
    return status in FILL_STATUSES
