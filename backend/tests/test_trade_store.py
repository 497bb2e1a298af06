"""SQL trade store over SQLite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.db.init import init_database
from app.models import AccountBalanceRow, FeeRow, TradeRow
from app.services.trade_import import import_trade_rows
from app.services.trade_store import SqlTradeStore, TradeQuery, TradeStoreError
from trade_insights.intents import FeeType
from trade_insights.models import Direction, OptionRight, SecurityClass


def _rows():
    return [
        TradeRow(
            trade_id="1001",
            account_code="ACC1",
            trade_date=date(2025, 11, 3),
            symbol="AAPL",
            underlying_symbol="AAPL",
            security_type="S",
            trade_type="B",
            stock_trade_price=Decimal("180.25"),
            stock_share_qty=Decimal("10"),
            net_amount=Decimal("-1802.50"),
            commission=Decimal("-1.00"),
        ),
        TradeRow(
            trade_id="1002",
            account_code="ACC1",
            trade_date=date(2025, 11, 5),
            symbol="AAPL",
            underlying_symbol="AAPL",
            security_type="S",
            trade_type="S",
            stock_trade_price=Decimal("185.00"),
            stock_share_qty=Decimal("10"),
            net_amount=Decimal("1850.00"),
        ),
        TradeRow(
            trade_id="1003",
            account_code="ACC1",
            trade_date=date(2025, 11, 6),
            symbol="AAPL  251121C00190000",
            underlying_symbol="AAPL",
            security_type="O",
            trade_type="S",
            option_trade_premium=Decimal("2.10"),
            option_contracts=Decimal("1"),
            strike=Decimal("190"),
            expiration=date(2025, 11, 21),
            call_put="C",
            net_amount=Decimal("209.35"),
            commission=Decimal("-0.65"),
        ),
        TradeRow(
            trade_id="2001",
            account_code="OTHER",
            trade_date=date(2025, 11, 4),
            symbol="AAPL",
            underlying_symbol="AAPL",
            security_type="S",
            trade_type="B",
            stock_trade_price=Decimal("181"),
            stock_share_qty=Decimal("1"),
        ),
    ]


async def _store(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'trades.db'}")
    await init_database(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        session.add_all(_rows())
        session.add_all(
            [
                FeeRow(account_code="ACC1", fee_date=date(2025, 11, 4), fee_type="DebitInt", amount=Decimal("-3.20")),
                FeeRow(account_code="ACC1", fee_date=date(2025, 11, 4), fee_type="LocateFee", amount=Decimal("-1")),
                AccountBalanceRow(account_code="ACC1", balance_date=date(2025, 11, 4), cash_balance=Decimal("500")),
                AccountBalanceRow(account_code="ACC1", balance_date=date(2025, 11, 5), cash_balance=Decimal("650")),
            ]
        )
        await session.commit()
    return engine, SqlTradeStore(factory)


async def test_fetch_trades_filters_and_orders(tmp_path):
    engine, store = await _store(tmp_path)
    try:
        records = await store.fetch_trades(TradeQuery(account_id="ACC1", symbol="AAPL"))
        assert [r.trade_id for r in records] == ["1003", "1002", "1001"]
        assert records[0].security_class is SecurityClass.OPTION
        assert records[0].option_right is OptionRight.CALL
        assert records[0].unit_price == Decimal("2.10")

        equity = await store.fetch_trades(
            TradeQuery(account_id="ACC1", symbol="AAPL", security_class=SecurityClass.EQUITY, order="asc")
        )
        assert [r.trade_id for r in equity] == ["1001", "1002"]

        sells = await store.fetch_trades(
            TradeQuery(
                account_id="ACC1",
                direction=Direction.SELL,
                date_from=date(2025, 11, 5),
                date_to=date(2025, 11, 5),
            )
        )
        assert [r.trade_id for r in sells] == ["1002"]

        expiring = await store.fetch_trades(
            TradeQuery(account_id="ACC1", expiration_from=date(2025, 11, 20), expiration_to=date(2025, 11, 21))
        )
        assert [r.trade_id for r in expiring] == ["1003"]

        latest = await store.fetch_trades(TradeQuery(account_id="ACC1", limit=1))
        assert [r.trade_id for r in latest] == ["1003"]
    finally:
        await engine.dispose()


async def test_fees_and_balances(tmp_path):
    engine, store = await _store(tmp_path)
    try:
        commissions = await store.fetch_fees("ACC1", FeeType.COMMISSION)
        assert sorted(entry.amount for entry in commissions) == [Decimal("0.65"), Decimal("1.00")]

        interest = await store.fetch_fees("ACC1", FeeType.DEBIT_INTEREST, date_from=date(2025, 11, 1))
        assert [entry.amount for entry in interest] == [Decimal("3.20")]

        latest = await store.latest_balance("ACC1")
        assert latest.balance_date == date(2025, 11, 5)
        assert latest.cash_balance == Decimal("650")

        history = await store.fetch_balances("ACC1", date_to=date(2025, 11, 4))
        assert [snapshot.balance_date for snapshot in history] == [date(2025, 11, 4)]
        assert await store.latest_balance("NOBODY") is None
    finally:
        await engine.dispose()


async def test_query_errors_become_store_errors(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    store = SqlTradeStore(async_sessionmaker(engine, expire_on_commit=False))
    try:
        with pytest.raises(TradeStoreError):
            await store.fetch_trades(TradeQuery(account_id="ACC1"))
    finally:
        await engine.dispose()


async def test_import_broker_rows_round_trips_through_store(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'import.db'}")
    await init_database(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    rows = [
        {
            "TradeID": "9001",
            "Date": "2025-11-10",
            "Symbol": "TSLA  251121P00200000",
            "UnderlyingSymbol": "TSLA",
            "SecurityType": "O",
            "TradeType": "S",
            "OptionTradePremium": "3.00",
            "OptionContracts": "1",
            "Strike": "200",
            "Expiration": "2025-11-21",
            "Call/Put": "P",
            "NetAmount": "299.35",
        },
        {"TradeID": "9002", "Date": "not a date", "Symbol": "TSLA", "SecurityType": "S", "TradeType": "B"},
    ]
    try:
        async with factory() as session:
            assert await import_trade_rows(session, "ACC9", rows) == 1

        records = await SqlTradeStore(factory).fetch_trades(TradeQuery(account_id="ACC9", symbol="TSLA"))
        assert len(records) == 1
        record = records[0]
        assert record.security_class is SecurityClass.OPTION
        assert record.direction is Direction.SELL
        assert record.option_right is OptionRight.PUT
        assert record.unit_price == Decimal("3.00")
        assert record.expiration == date(2025, 11, 21)
    finally:
        await engine.dispose()
