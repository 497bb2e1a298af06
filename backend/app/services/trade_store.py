"""Trade-record store adapters.

The engine never performs I/O; the orchestrator talks to a :class:`TradeStore`
to fetch fully materialized lists of records. :class:`SqlTradeStore` reads the
SQLAlchemy tables in :mod:`app.models`, while :class:`InMemoryTradeStore` keeps
the same filter semantics over plain lists for demos and tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Literal, Optional, Protocol, Sequence

from sqlalchemy import Select, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models import AccountBalanceRow, FeeRow, TradeRow
from trade_insights.intents import FeeType
from trade_insights.models import Direction, OptionRight, SecurityClass, TradeRecord

logger = logging.getLogger(__name__)

_SECURITY_CODES = {SecurityClass.EQUITY: "S", SecurityClass.OPTION: "O"}
_DIRECTION_CODES = {Direction.BUY: "B", Direction.SELL: "S"}
_RIGHT_CODES = {OptionRight.CALL: "C", OptionRight.PUT: "P"}
_FEE_CODES = {
    FeeType.CREDIT_INTEREST: "CreditInt",
    FeeType.DEBIT_INTEREST: "DebitInt",
    FeeType.LOCATE_FEE: "LocateFee",
}


class TradeStoreError(RuntimeError):
    """Raised when the trade-record store cannot be queried."""


@dataclass(frozen=True)
class TradeQuery:
    """Filters understood by every store implementation.

    ``symbol`` matches either the traded symbol or the underlying symbol so
    that option contracts are returned alongside their underlying's shares.
    Bounds are inclusive and expressed in store calendar dates.
    """

    account_id: str
    symbol: Optional[str] = None
    security_class: Optional[SecurityClass] = None
    direction: Optional[Direction] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    option_right: Optional[OptionRight] = None
    expiration_from: Optional[date] = None
    expiration_to: Optional[date] = None
    order: Literal["asc", "desc"] = "desc"
    limit: Optional[int] = None

    def matches(self, record: TradeRecord) -> bool:
        if self.symbol and self.symbol not in {record.symbol, record.underlying_symbol}:
            return False
        if self.security_class and record.security_class is not self.security_class:
            return False
        if self.direction and record.direction is not self.direction:
            return False
        if self.date_from and record.trade_date < self.date_from:
            return False
        if self.date_to and record.trade_date > self.date_to:
            return False
        if self.option_right and record.option_right is not self.option_right:
            return False
        if self.expiration_from or self.expiration_to:
            if record.expiration is None:
                return False
            if self.expiration_from and record.expiration < self.expiration_from:
                return False
            if self.expiration_to and record.expiration > self.expiration_to:
                return False
        return True


@dataclass(frozen=True)
class FeeEntry:
    fee_date: date
    amount: Decimal
    fee_type: FeeType
    symbol: Optional[str] = None


@dataclass(frozen=True)
class BalanceSnapshot:
    balance_date: date
    cash_balance: Decimal | None = None
    account_equity: Decimal | None = None
    day_trading_bp: Decimal | None = None
    stock_lmv: Decimal | None = None
    stock_smv: Decimal | None = None
    options_lmv: Decimal | None = None
    options_smv: Decimal | None = None
    credit_balance: Decimal | None = None
    debit_balance: Decimal | None = None
    house_requirement: Decimal | None = None
    house_excess_deficit: Decimal | None = None
    fed_requirement: Decimal | None = None
    fed_excess_deficit: Decimal | None = None


class TradeStore(Protocol):
    async def fetch_trades(self, query: TradeQuery) -> List[TradeRecord]:
        ...

    async def fetch_fees(
        self,
        account_id: str,
        fee_type: FeeType,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        symbol: str | None = None,
    ) -> List[FeeEntry]:
        ...

    async def latest_balance(self, account_id: str) -> BalanceSnapshot | None:
        ...

    async def fetch_balances(
        self,
        account_id: str,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> List[BalanceSnapshot]:
        ...


def _sort_records(records: Iterable[TradeRecord], order: str) -> List[TradeRecord]:
    return sorted(records, key=lambda r: (r.trade_date, r.trade_id), reverse=order == "desc")


def _balance_from_row(row: AccountBalanceRow) -> BalanceSnapshot:
    return BalanceSnapshot(
        balance_date=row.balance_date,
        cash_balance=row.cash_balance,
        account_equity=row.account_equity,
        day_trading_bp=row.day_trading_bp,
        stock_lmv=row.stock_lmv,
        stock_smv=row.stock_smv,
        options_lmv=row.options_lmv,
        options_smv=row.options_smv,
        credit_balance=row.credit_balance,
        debit_balance=row.debit_balance,
        house_requirement=row.house_requirement,
        house_excess_deficit=row.house_excess_deficit,
        fed_requirement=row.fed_requirement,
        fed_excess_deficit=row.fed_excess_deficit,
    )


class SqlTradeStore:
    """Store backed by the ``trade_data``, ``fees_and_interest`` and ``account_balance`` tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    def _trade_statement(self, query: TradeQuery) -> Select:
        stmt = select(TradeRow).where(TradeRow.account_code == query.account_id)
        if query.symbol:
            stmt = stmt.where(or_(TradeRow.symbol == query.symbol, TradeRow.underlying_symbol == query.symbol))
        if query.security_class:
            stmt = stmt.where(TradeRow.security_type == _SECURITY_CODES[query.security_class])
        if query.direction:
            stmt = stmt.where(TradeRow.trade_type == _DIRECTION_CODES[query.direction])
        if query.date_from:
            stmt = stmt.where(TradeRow.trade_date >= query.date_from)
        if query.date_to:
            stmt = stmt.where(TradeRow.trade_date <= query.date_to)
        if query.option_right:
            stmt = stmt.where(TradeRow.call_put == _RIGHT_CODES[query.option_right])
        if query.expiration_from:
            stmt = stmt.where(TradeRow.expiration >= query.expiration_from)
        if query.expiration_to:
            stmt = stmt.where(TradeRow.expiration <= query.expiration_to)
        if query.order == "asc":
            stmt = stmt.order_by(TradeRow.trade_date.asc(), TradeRow.trade_id.asc())
        else:
            stmt = stmt.order_by(TradeRow.trade_date.desc(), TradeRow.trade_id.desc())
        if query.limit:
            stmt = stmt.limit(query.limit)
        return stmt

    async def fetch_trades(self, query: TradeQuery) -> List[TradeRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(self._trade_statement(query))
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Trade query failed for account %s", query.account_id)
            raise TradeStoreError("Trade-record store query failed") from exc

        records: List[TradeRecord] = []
        for row in rows:
            try:
                records.append(TradeRecord.from_row(row.as_row()))
            except ValueError:
                logger.warning("Skipping unreadable trade row id=%s", row.id)
        return records

    async def fetch_fees(
        self,
        account_id: str,
        fee_type: FeeType,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        symbol: str | None = None,
    ) -> List[FeeEntry]:
        # Commissions live on the trade rows; interest and locate fees in their own table.
        if fee_type is FeeType.COMMISSION:
            stmt = select(TradeRow.trade_date, TradeRow.commission, TradeRow.symbol).where(
                TradeRow.account_code == account_id, TradeRow.commission.is_not(None)
            )
            date_column = TradeRow.trade_date
            symbol_column = TradeRow.symbol
        else:
            stmt = select(FeeRow.fee_date, FeeRow.amount, FeeRow.symbol).where(
                FeeRow.account_code == account_id, FeeRow.fee_type == _FEE_CODES[fee_type]
            )
            date_column = FeeRow.fee_date
            symbol_column = FeeRow.symbol
        if date_from:
            stmt = stmt.where(date_column >= date_from)
        if date_to:
            stmt = stmt.where(date_column <= date_to)
        if symbol:
            stmt = stmt.where(symbol_column == symbol)
        stmt = stmt.order_by(date_column.desc())

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as exc:
            logger.exception("Fee query failed for account %s", account_id)
            raise TradeStoreError("Fee query failed") from exc
        return [
            FeeEntry(fee_date=row[0], amount=abs(Decimal(row[1])), fee_type=fee_type, symbol=row[2])
            for row in rows
        ]

    async def latest_balance(self, account_id: str) -> BalanceSnapshot | None:
        stmt = (
            select(AccountBalanceRow)
            .where(AccountBalanceRow.account_code == account_id)
            .order_by(AccountBalanceRow.balance_date.desc())
            .limit(1)
        )
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.exception("Balance query failed for account %s", account_id)
            raise TradeStoreError("Account balance query failed") from exc
        return _balance_from_row(row) if row is not None else None

    async def fetch_balances(
        self,
        account_id: str,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> List[BalanceSnapshot]:
        stmt = select(AccountBalanceRow).where(AccountBalanceRow.account_code == account_id)
        if date_from:
            stmt = stmt.where(AccountBalanceRow.balance_date >= date_from)
        if date_to:
            stmt = stmt.where(AccountBalanceRow.balance_date <= date_to)
        stmt = stmt.order_by(AccountBalanceRow.balance_date.desc())
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Balance history query failed for account %s", account_id)
            raise TradeStoreError("Account balance query failed") from exc
        return [_balance_from_row(row) for row in rows]


@dataclass
class InMemoryTradeStore:
    """List-backed store for a single account."""

    account_id: str
    trades: Sequence[TradeRecord] = field(default_factory=list)
    fees: Sequence[FeeEntry] = field(default_factory=list)
    balances: Sequence[BalanceSnapshot] = field(default_factory=list)

    async def fetch_trades(self, query: TradeQuery) -> List[TradeRecord]:
        if query.account_id != self.account_id:
            return []
        records = _sort_records((r for r in self.trades if query.matches(r)), query.order)
        return records[: query.limit] if query.limit else records

    async def fetch_fees(
        self,
        account_id: str,
        fee_type: FeeType,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        symbol: str | None = None,
    ) -> List[FeeEntry]:
        if account_id != self.account_id:
            return []
        if fee_type is FeeType.COMMISSION:
            entries = [
                FeeEntry(fee_date=r.trade_date, amount=abs(r.commission), fee_type=fee_type, symbol=r.symbol)
                for r in self.trades
                if r.commission is not None
            ]
        else:
            entries = [entry for entry in self.fees if entry.fee_type is fee_type]
        selected = [
            entry
            for entry in entries
            if (date_from is None or entry.fee_date >= date_from)
            and (date_to is None or entry.fee_date <= date_to)
            and (symbol is None or entry.symbol == symbol)
        ]
        return sorted(selected, key=lambda entry: entry.fee_date, reverse=True)

    async def latest_balance(self, account_id: str) -> BalanceSnapshot | None:
        history = await self.fetch_balances(account_id)
        return history[0] if history else None

    async def fetch_balances(
        self,
        account_id: str,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> List[BalanceSnapshot]:
        if account_id != self.account_id:
            return []
        selected = [
            snapshot
            for snapshot in self.balances
            if (date_from is None or snapshot.balance_date >= date_from)
            and (date_to is None or snapshot.balance_date <= date_to)
        ]
        return sorted(selected, key=lambda snapshot: snapshot.balance_date, reverse=True)


__all__ = [
    "BalanceSnapshot",
    "FeeEntry",
    "InMemoryTradeStore",
    "SqlTradeStore",
    "TradeQuery",
    "TradeStore",
    "TradeStoreError",
]
