import asyncio
import inspect
import pathlib
import sys
from datetime import date
from decimal import Decimal
from itertools import count

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from trade_insights.models import Direction, OptionRight, SecurityClass, TradeRecord  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            argnames = pyfuncitem._fixtureinfo.argnames
            kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}
            loop.run_until_complete(test_function(**kwargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture
def make_trade():
    """Factory for ``TradeRecord`` values with sensible equity defaults."""

    ids = count(1)

    def _make(
        day: date,
        direction: str = "Buy",
        quantity: str | None = "10",
        price: str | None = "100",
        *,
        symbol: str = "AAPL",
        option: bool = False,
        strike: str | None = None,
        expiration: date | None = None,
        right: str | None = None,
        net: str | None = None,
        gross: str | None = None,
        commission: str | None = None,
        trade_id: str | None = None,
    ) -> TradeRecord:
        qty = Decimal(quantity) if quantity is not None else None
        unit = Decimal(price) if price is not None else None
        if net is None and qty is not None and unit is not None:
            multiplier = Decimal("100") if option else Decimal("1")
            value = qty * unit * multiplier
            net_amount = -value if direction == "Buy" else value
        else:
            net_amount = Decimal(net) if net is not None else None
        return TradeRecord(
            trade_id=trade_id or f"T{next(ids):04d}",
            trade_date=day,
            symbol=symbol,
            underlying_symbol=symbol,
            security_class=SecurityClass.OPTION if option else SecurityClass.EQUITY,
            direction=Direction(direction),
            quantity=qty,
            unit_price=unit,
            strike=Decimal(strike) if strike is not None else None,
            expiration=expiration,
            option_right=OptionRight(right) if right else None,
            gross_amount=Decimal(gross) if gross is not None else None,
            net_amount=net_amount,
            commission=Decimal(commission) if commission is not None else None,
        )

    return _make


@pytest.fixture
def sample_store(make_trade):
    """One account with AAPL shares, TSLA options, fees and daily balances."""

    from app.services.trade_store import BalanceSnapshot, FeeEntry, InMemoryTradeStore
    from trade_insights.intents import FeeType

    trades = [
        make_trade(date(2025, 3, 3), "Buy", "10", "150", trade_id="T1"),
        make_trade(date(2025, 6, 2), "Sell", "10", "180", trade_id="T2"),
        make_trade(date(2025, 7, 1), "Buy", "5", "200", trade_id="T3"),
        make_trade(date(2025, 8, 1), "Sell", "5", "190", trade_id="T4"),
        make_trade(date(2025, 11, 17), "Buy", "10", "180", commission="1.00", trade_id="T5"),
        make_trade(
            date(2025, 11, 10),
            "Sell",
            "2",
            "1.50",
            symbol="TSLA",
            option=True,
            strike="250",
            expiration=date(2025, 11, 21),
            right="Call",
            commission="1.30",
            trade_id="O1",
        ),
        make_trade(
            date(2025, 11, 14),
            "Sell",
            "1",
            "3.00",
            symbol="TSLA",
            option=True,
            strike="200",
            expiration=date(2025, 12, 19),
            right="Put",
            trade_id="O2",
        ),
        make_trade(
            date(2025, 11, 18),
            "Buy",
            "2",
            "0.50",
            symbol="TSLA",
            option=True,
            strike="260",
            expiration=date(2025, 11, 21),
            right="Call",
            commission="0.65",
            trade_id="O3",
        ),
    ]
    fees = [
        FeeEntry(fee_date=date(2025, 11, 3), amount=Decimal("4.10"), fee_type=FeeType.DEBIT_INTEREST),
        FeeEntry(fee_date=date(2025, 10, 1), amount=Decimal("3.90"), fee_type=FeeType.DEBIT_INTEREST),
        FeeEntry(fee_date=date(2025, 11, 12), amount=Decimal("2.00"), fee_type=FeeType.LOCATE_FEE, symbol="GME"),
    ]
    balances = [
        BalanceSnapshot(
            balance_date=date(2025, 11, 17),
            cash_balance=Decimal("10000"),
            debit_balance=Decimal("1000"),
            credit_balance=Decimal("0"),
        ),
        BalanceSnapshot(
            balance_date=date(2025, 11, 18),
            cash_balance=Decimal("9500"),
            debit_balance=Decimal("1500"),
            credit_balance=Decimal("0"),
        ),
        BalanceSnapshot(
            balance_date=date(2025, 11, 19),
            cash_balance=Decimal("9250.555"),
            debit_balance=Decimal("1500"),
            credit_balance=Decimal("0"),
        ),
    ]
    return InMemoryTradeStore(account_id="default", trades=trades, fees=fees, balances=balances)
