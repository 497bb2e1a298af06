"""Trade, fee/interest and account balance tables of the trade-record store."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class TradeRow(Base):
    """One executed trade; ``security_type`` is ``S``/``O`` and ``trade_type`` ``B``/``S``."""

    __tablename__ = "trade_data"
    __table_args__ = (
        Index("ix_trade_data_account_date", "account_code", "trade_date"),
        Index("ix_trade_data_underlying", "underlying_symbol"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    trade_id: Mapped[str] = mapped_column(String(64), index=True)
    account_code: Mapped[str] = mapped_column(String(32))
    trade_date: Mapped[date] = mapped_column(Date)
    symbol: Mapped[str] = mapped_column(String(64), index=True)
    underlying_symbol: Mapped[str | None] = mapped_column(String(16), nullable=True)
    security_type: Mapped[str] = mapped_column(String(1))
    trade_type: Mapped[str] = mapped_column(String(1))
    stock_trade_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 6), nullable=True)
    stock_share_qty: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    option_trade_premium: Mapped[Decimal | None] = mapped_column(Numeric(18, 6), nullable=True)
    option_contracts: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    strike: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    expiration: Mapped[date | None] = mapped_column(Date, nullable=True)
    call_put: Mapped[str | None] = mapped_column(String(1), nullable=True)
    gross_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    net_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    commission: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)

    def as_row(self) -> dict[str, Any]:
        """Broker-style mapping accepted by ``TradeRecord.from_row``."""

        return {
            "TradeID": self.trade_id,
            "Date": self.trade_date,
            "Symbol": self.symbol,
            "UnderlyingSymbol": self.underlying_symbol,
            "SecurityType": self.security_type,
            "TradeType": self.trade_type,
            "StockTradePrice": self.stock_trade_price,
            "StockShareQty": self.stock_share_qty,
            "OptionTradePremium": self.option_trade_premium,
            "OptionContracts": self.option_contracts,
            "Strike": self.strike,
            "Expiration": self.expiration,
            "Call/Put": self.call_put,
            "GrossAmount": self.gross_amount,
            "NetAmount": self.net_amount,
            "Commission": self.commission,
        }


class FeeRow(Base):
    """Interest accruals and locate fees; ``fee_type`` is ``CreditInt``, ``DebitInt`` or ``LocateFee``."""

    __tablename__ = "fees_and_interest"
    __table_args__ = (Index("ix_fees_account_date", "account_code", "fee_date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    account_code: Mapped[str] = mapped_column(String(32))
    fee_date: Mapped[date] = mapped_column(Date)
    fee_type: Mapped[str] = mapped_column(String(16))
    symbol: Mapped[str | None] = mapped_column(String(16), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 4))
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)


class AccountBalanceRow(Base):
    """Daily account balance snapshot."""

    __tablename__ = "account_balance"
    __table_args__ = (Index("ix_account_balance_account_date", "account_code", "balance_date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    account_code: Mapped[str] = mapped_column(String(32))
    balance_date: Mapped[date] = mapped_column(Date)
    cash_balance: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    account_equity: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    day_trading_bp: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    stock_lmv: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    stock_smv: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    options_lmv: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    options_smv: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    credit_balance: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    debit_balance: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    house_requirement: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    house_excess_deficit: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    fed_requirement: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    fed_excess_deficit: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)


__all__ = ["AccountBalanceRow", "FeeRow", "TradeRow"]
