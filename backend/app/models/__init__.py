"""Database model exports."""

from .trades import AccountBalanceRow, FeeRow, TradeRow

__all__ = [
    "TradeRow",
    "FeeRow",
    "AccountBalanceRow",
]
