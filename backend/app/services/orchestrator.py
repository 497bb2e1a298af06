"""Build analytical cards for resolved assistant intents.

The orchestrator is deliberately thin: it turns ``(intent, entities)`` into
:class:`~app.services.trade_store.TradeQuery` filters, fetches fully
materialized record lists, sorts them explicitly for each use and hands them
to the pure functions in :mod:`trade_insights`. Store failures propagate as
:class:`~app.services.trade_store.TradeStoreError`; partial results never
reach the analytics functions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Awaitable, Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from app.config import AppSettings
from app.core.telemetry import get_tracer, record_card
from app.schemas.cards import (
    AccountBalanceCard,
    AdvancedOptionQueryCard,
    AllTradesCard,
    AveragePriceCard,
    BalanceSchema,
    BalanceTrendSchema,
    BulkOptionsCard,
    CardPayload,
    DetailedTradesCard,
    ExpiringOptionsCard,
    FeeLineSchema,
    FeesCard,
    LastOptionTradeCard,
    OptionAggregateSchema,
    PriceExtremesCard,
    ProfitableTradesCard,
    RoundTripSchema,
    StrikeExtremeCard,
    TimeWindowTradesCard,
    TotalPremiumCard,
    TradeRowSchema,
    TradeSummaryCard,
    TradeWindowSummary,
    WindowSchema,
    as_float,
    money,
)
from app.services.trade_store import BalanceSnapshot, TradeQuery, TradeStore, TradeStoreError
from trade_insights.intents import AccountQuery, DirectionFilter, Entities, FeeType, IntentTag, Matched, StrikeOrder
from trade_insights.lots import match_round_trips, profitable_round_trips, sort_for_matching, split_by_direction, total_realized
from trade_insights.models import ZERO, Direction, SecurityClass, TimeWindow, TradeRecord
from trade_insights.price_stats import TieBreak, aggregate, dominant_direction, strike_extreme, summarize_options
from trade_insights.time_windows import resolve_expiration_window, resolve_time_window, year_to_date


logger = logging.getLogger(__name__)


class UnresolvedPeriodError(ValueError):
    """Raised internally when a period cannot be resolved and the policy rejects fallbacks."""


@dataclass(frozen=True)
class DisplayCalendar:
    """Uniform shift between the store calendar and the calendar shown to users.

    ``offset_days`` is added to displayed dates to obtain store dates, so
    historical demo data can be presented as if it were recent.
    """

    offset_days: int = 0

    def to_store(self, day: date) -> date:
        return day + timedelta(days=self.offset_days)

    def to_display(self, day: date | None) -> date | None:
        if day is None:
            return None
        return day - timedelta(days=self.offset_days)

    def display_range(self, window: TimeWindow) -> str:
        if window.start_date == window.end_date:
            return window.start_date.strftime("%b %d, %Y")
        return f"{window.start_date:%b %d, %Y} to {window.end_date:%b %d, %Y}"


def _direction(entities: Entities) -> Direction | None:
    if entities.direction is DirectionFilter.BUY:
        return Direction.BUY
    if entities.direction is DirectionFilter.SELL:
        return Direction.SELL
    return None


def _direction_label(entities: Entities) -> str | None:
    direction = _direction(entities)
    return direction.value if direction else None


Builder = Callable[[Entities, date, TieBreak], Awaitable[Optional[CardPayload]]]


class CardOrchestrator:
    """Select and fill the card for one resolved intent."""

    def __init__(self, store: TradeStore, settings: AppSettings) -> None:
        self._store = store
        self._settings = settings
        self._calendar = DisplayCalendar(settings.display_date_offset_days)
        self._builders: Dict[IntentTag, Builder] = {
            IntentTag.ACCOUNT_BALANCE: self._account_balance,
            IntentTag.FEES: self._fees,
            IntentTag.EXPIRING_OPTIONS: self._expiring_options,
            IntentTag.ALL_TRADES: self._all_trades,
            IntentTag.BULK_OPTIONS: self._option_trades,
            IntentTag.LAST_OPTION_TRADE: self._last_option_trade,
            IntentTag.HIGHEST_OR_LOWEST_STRIKE: self._strike_extreme,
            IntentTag.TOTAL_PREMIUM: self._total_premium,
            IntentTag.ADVANCED_OPTION_QUERY: self._advanced_options,
            IntentTag.TIME_WINDOW_TRADES: self._time_window_trades,
            IntentTag.AVERAGE_PRICE: self._average_price,
            IntentTag.PRICE_EXTREMES: self._price_extremes,
            IntentTag.PROFITABLE_TRADES: self._profitable_trades,
            IntentTag.DETAILED_TRADES: self._detailed_trades,
            IntentTag.TRADE_SUMMARY: self._trade_summary,
        }

    @property
    def calendar(self) -> DisplayCalendar:
        return self._calendar

    def today(self) -> date:
        if self._settings.anchor_date is not None:
            return self._settings.anchor_date
        return datetime.now(ZoneInfo(self._settings.timezone)).date()

    async def build_card(
        self,
        resolution: Matched,
        *,
        anchor: date | None = None,
        tie_break: TieBreak = TieBreak.FIRST_IN_INPUT,
    ) -> CardPayload | None:
        """Return the card for ``resolution`` or ``None`` when no card applies."""

        anchor = anchor or self.today()
        builder = self._builders[resolution.intent]
        intent = resolution.intent.value
        with get_tracer().start_as_current_span("trade_insights.build_card") as span:
            span.set_attribute("card.intent", intent)
            try:
                card = await builder(resolution.entities, anchor, tie_break)
            except UnresolvedPeriodError as exc:
                logger.info("No %s card: unresolved period %r", intent, str(exc))
                record_card(intent, "unresolved_period")
                return None
            except TradeStoreError:
                logger.warning("Store failure while building %s card", intent)
                span.set_attribute("card.store_error", True)
                record_card(intent, "store_error")
                raise
            record_card(intent, "built" if card is not None else "empty")
            return card

    # Helpers

    def _period(self, phrase: str | None, anchor: date, *, fallback_ytd: bool) -> TimeWindow | None:
        if phrase:
            window = resolve_time_window(phrase, anchor)
            if window is not None:
                return window
            if self._settings.unresolved_period_policy == "reject":
                raise UnresolvedPeriodError(phrase)
            logger.info("Unresolved period %r; falling back to year to date", phrase)
            return year_to_date(anchor)
        return year_to_date(anchor) if fallback_ytd else None

    def _query(
        self,
        entities: Entities,
        window: TimeWindow | None,
        *,
        symbol: str | None = None,
        security_class: SecurityClass | None = None,
        order: str = "desc",
        limit: int | None = None,
        with_direction: bool = True,
        with_right: bool = False,
    ) -> TradeQuery:
        return TradeQuery(
            account_id=self._settings.account_id,
            symbol=symbol,
            security_class=security_class,
            direction=_direction(entities) if with_direction else None,
            date_from=self._calendar.to_store(window.start_date) if window else None,
            date_to=self._calendar.to_store(window.end_date) if window else None,
            option_right=entities.option_right if with_right else None,
            order=order,  # type: ignore[arg-type]
            limit=limit,
        )

    def window_schema(self, window: TimeWindow) -> WindowSchema:
        return WindowSchema(
            description=window.description,
            start_date=window.start_date,
            end_date=window.end_date,
            display_range=self._calendar.display_range(window),
            trading_day_count=window.trading_day_count,
        )

    def _row(self, record: TradeRecord) -> TradeRowSchema:
        return TradeRowSchema(
            trade_id=record.trade_id,
            trade_date=self._calendar.to_display(record.trade_date),
            symbol=record.symbol,
            underlying_symbol=record.underlying_symbol,
            security_class=record.security_class.value,
            direction=record.direction.value,
            quantity=as_float(record.quantity),
            price=money(record.unit_price),
            strike=money(record.strike),
            expiration=self._calendar.to_display(record.expiration),
            option_right=record.option_right.value if record.option_right else None,
            net_amount=money(record.net_amount),
            commission=money(record.commission),
        )

    def _rows(self, records: Sequence[TradeRecord]) -> List[TradeRowSchema]:
        return [self._row(record) for record in records[: self._settings.trade_row_limit]]

    # Price statistics

    async def _price_stat_fields(
        self, entities: Entities, anchor: date, tie_break: TieBreak, *, average_only: bool
    ) -> dict | None:
        if not entities.symbol:
            logger.info("Price statistics need a symbol; skipping card")
            return None
        window = self._period(entities.time_phrase, anchor, fallback_ytd=True)
        query = self._query(entities, window, symbol=entities.symbol, security_class=SecurityClass.EQUITY)
        records = await self._store.fetch_trades(query)
        # Date-descending input keeps the most recent occurrence for tied extremes.
        records = sorted(records, key=lambda r: (r.trade_date, r.trade_id), reverse=True)
        stat = aggregate(records, tie_break=tie_break)
        direction = _direction_label(entities)
        if direction is None and average_only:
            shared = dominant_direction(records)
            direction = shared.value if shared else None
        return {
            "symbol": entities.symbol,
            "period": window.description if window else "all time",
            "direction": direction,
            "highest": money(stat.highest),
            "highest_date": self._calendar.to_display(stat.highest_date),
            "highest_quantity": as_float(stat.highest_quantity),
            "lowest": money(stat.lowest),
            "lowest_date": self._calendar.to_display(stat.lowest_date),
            "lowest_quantity": as_float(stat.lowest_quantity),
            "average": money(stat.average),
            "trade_count": stat.trade_count,
            "total_quantity": as_float(stat.total_quantity),
            "total_notional": money(stat.total_notional),
        }

    async def _price_extremes(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload | None:
        fields = await self._price_stat_fields(entities, anchor, tie_break, average_only=False)
        return PriceExtremesCard(**fields) if fields is not None else None

    async def _average_price(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload | None:
        fields = await self._price_stat_fields(entities, anchor, tie_break, average_only=True)
        return AveragePriceCard(**fields) if fields is not None else None

    # Round-trips

    async def _profitable_trades(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        window = self._period(entities.time_phrase, anchor, fallback_ytd=False)
        query = self._query(entities, window, symbol=entities.symbol, order="asc", with_direction=False)
        records = sort_for_matching(await self._store.fetch_trades(query))
        buys, sells = split_by_direction(records)
        winners = profitable_round_trips(match_round_trips(buys, sells))
        trips = [
            RoundTripSchema(
                security_class=trip.security_class.value,
                buy_date=self._calendar.to_display(trip.buy_date),
                sell_date=self._calendar.to_display(trip.sell_date),
                quantity=float(trip.quantity),
                buy_price=money(trip.buy_price),
                sell_price=money(trip.sell_price),
                profit_loss=money(trip.realized_pnl),
            )
            for trip in winners
        ]
        return ProfitableTradesCard(
            symbol=entities.symbol,
            period=window.description if window else None,
            total_profitable_trades=len(winners),
            total_profit=money(total_realized(winners)),
            trades=trips,
        )

    # Trade listings

    async def _time_window_trades(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload | None:
        window = self._period(entities.time_phrase, anchor, fallback_ytd=True)
        symbol = None if entities.portfolio_wide else entities.symbol
        query = self._query(entities, window, symbol=symbol, with_direction=False)
        records = await self._store.fetch_trades(query)
        equity = [r for r in records if not r.is_option]
        average_price = aggregate(equity).average if symbol else None
        return TimeWindowTradesCard(
            symbol=symbol,
            portfolio_wide=symbol is None,
            window=self.window_schema(window),
            summary=TradeWindowSummary(
                total_trades=len(records),
                equity_count=len(equity),
                option_count=len(records) - len(equity),
                total_notional=money(sum((r.notional for r in records), ZERO)),
                average_price=money(average_price),
            ),
            trades=self._rows(records),
        )

    async def _trade_summary(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        stock_count, option_count = entities.stock_count, entities.option_count
        if stock_count is None or option_count is None:
            records = await self._store.fetch_trades(
                self._query(entities, None, symbol=entities.symbol, with_direction=False)
            )
            option_count = sum(1 for r in records if r.is_option)
            stock_count = len(records) - option_count
        return TradeSummaryCard(
            symbol=entities.symbol,
            stock_count=stock_count,
            option_count=option_count,
            total_trades=stock_count + option_count,
        )

    async def _detailed_trades(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload | None:
        if not entities.symbol:
            return None
        window = self._period(entities.time_phrase, anchor, fallback_ytd=False)
        records = await self._store.fetch_trades(self._query(entities, window, symbol=entities.symbol))
        shares_purchased = shares_sold = total_cost = total_proceeds = ZERO
        for record in records:
            if record.is_option:
                continue
            quantity = record.quantity or ZERO
            value = quantity * (record.unit_price or ZERO)
            if record.direction is Direction.BUY:
                shares_purchased += quantity
                total_cost += value
            else:
                shares_sold += quantity
                total_proceeds += value
        return DetailedTradesCard(
            symbol=entities.symbol,
            period=window.description if window else None,
            total_trades=len(records),
            shares_purchased=float(shares_purchased),
            total_cost=money(total_cost),
            shares_sold=float(shares_sold),
            total_proceeds=money(total_proceeds),
            trades=self._rows(records),
        )

    async def _all_trades(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        window = self._period(entities.time_phrase, anchor, fallback_ytd=False)
        records = await self._store.fetch_trades(
            self._query(entities, window, symbol=entities.symbol, with_direction=False)
        )
        option_count = sum(1 for r in records if r.is_option)
        return AllTradesCard(
            symbol=entities.symbol,
            period=window.description if window else None,
            stock_count=len(records) - option_count,
            option_count=option_count,
            trades=self._rows(records),
        )

    # Options

    async def _fetch_options(self, entities: Entities, window: TimeWindow | None, **kwargs) -> List[TradeRecord]:
        query = self._query(
            entities,
            window,
            symbol=entities.symbol,
            security_class=SecurityClass.OPTION,
            with_right=True,
            **kwargs,
        )
        return await self._store.fetch_trades(query)

    async def _option_fields(self, entities: Entities, anchor: date) -> dict:
        window = self._period(entities.time_phrase, anchor, fallback_ytd=False)
        records = await self._fetch_options(entities, window)
        summary = summarize_options(records)
        return {
            "symbol": entities.symbol,
            "period": window.description if window else None,
            "direction": _direction_label(entities),
            "option_right": entities.option_right.value if entities.option_right else None,
            "aggregate": OptionAggregateSchema(
                trade_count=summary.trade_count,
                total_premium=money(summary.total_premium),
                total_notional=money(summary.total_notional),
                average_premium=money(summary.average_premium),
                total_contracts=float(summary.total_contracts),
                total_shares=float(summary.total_shares),
                shares_covered=float(summary.shares_covered),
                buy_count=summary.buy_count,
                sell_count=summary.sell_count,
                equity_count=summary.equity_count,
                option_count=summary.option_count,
                call_count=summary.call_count,
                put_count=summary.put_count,
            ),
            "trades": self._rows(records),
        }

    async def _option_trades(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        return BulkOptionsCard(**await self._option_fields(entities, anchor))

    async def _advanced_options(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        return AdvancedOptionQueryCard(**await self._option_fields(entities, anchor))

    async def _last_option_trade(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        records = await self._fetch_options(entities, None, limit=1)
        return LastOptionTradeCard(
            symbol=entities.symbol,
            direction=_direction_label(entities),
            option_right=entities.option_right.value if entities.option_right else None,
            trade=self._row(records[0]) if records else None,
        )

    async def _strike_extreme(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        window = self._period(entities.time_phrase, anchor, fallback_ytd=False)
        records = await self._fetch_options(entities, window)
        order = entities.strike_order or StrikeOrder.HIGHEST
        best = strike_extreme(records, highest=order is StrikeOrder.HIGHEST)
        return StrikeExtremeCard(
            symbol=entities.symbol,
            order=order.value,
            direction=_direction_label(entities),
            option_right=entities.option_right.value if entities.option_right else None,
            options_considered=sum(1 for r in records if r.strike is not None),
            trade=self._row(best) if best else None,
        )

    async def _total_premium(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        window = self._period(entities.time_phrase, anchor, fallback_ytd=False)
        summary = summarize_options(await self._fetch_options(entities, window))
        return TotalPremiumCard(
            symbol=entities.symbol,
            period=window.description if window else None,
            direction=_direction_label(entities),
            option_right=entities.option_right.value if entities.option_right else None,
            trade_count=summary.trade_count,
            total_contracts=float(summary.total_contracts),
            total_premium=money(summary.total_premium),
            average_premium=money(summary.average_premium),
        )

    async def _expiring_options(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload | None:
        window = resolve_expiration_window(entities.expiration_phrase, anchor)
        if window is None:
            logger.info("Unresolved expiration phrase %r", entities.expiration_phrase)
            return None
        query = TradeQuery(
            account_id=self._settings.account_id,
            symbol=entities.symbol,
            security_class=SecurityClass.OPTION,
            option_right=entities.option_right,
            expiration_from=self._calendar.to_store(window.start_date),
            expiration_to=self._calendar.to_store(window.end_date),
            order="desc",
        )
        records = await self._store.fetch_trades(query)
        records = sorted(records, key=lambda r: (r.expiration or window.end_date, r.symbol))
        summary = summarize_options(records)
        return ExpiringOptionsCard(
            symbol=entities.symbol,
            window=self.window_schema(window),
            total_contracts=float(summary.total_contracts),
            call_count=summary.call_count,
            put_count=summary.put_count,
            trades=self._rows(records),
        )

    # Account

    def _balance_schema(self, snapshot: BalanceSnapshot) -> BalanceSchema:
        return BalanceSchema(
            balance_date=self._calendar.to_display(snapshot.balance_date),
            cash_balance=money(snapshot.cash_balance),
            account_equity=money(snapshot.account_equity),
            day_trading_bp=money(snapshot.day_trading_bp),
            stock_lmv=money(snapshot.stock_lmv),
            stock_smv=money(snapshot.stock_smv),
            options_lmv=money(snapshot.options_lmv),
            options_smv=money(snapshot.options_smv),
            credit_balance=money(snapshot.credit_balance),
            debit_balance=money(snapshot.debit_balance),
            house_requirement=money(snapshot.house_requirement),
            house_excess_deficit=money(snapshot.house_excess_deficit),
            fed_requirement=money(snapshot.fed_requirement),
            fed_excess_deficit=money(snapshot.fed_excess_deficit),
        )

    async def _account_balance(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        query_type = entities.account_query or AccountQuery.ACCOUNT_SUMMARY
        account_id = self._settings.account_id
        if query_type in {AccountQuery.DEBIT_BALANCES, AccountQuery.CREDIT_BALANCES}:
            window = self._period(entities.time_phrase, anchor, fallback_ytd=False)
            history = await self._store.fetch_balances(
                account_id,
                date_from=self._calendar.to_store(window.start_date) if window else None,
                date_to=self._calendar.to_store(window.end_date) if window else None,
            )
            field = "debit_balance" if query_type is AccountQuery.DEBIT_BALANCES else "credit_balance"
            trend = None
            if history:
                values = [(getattr(s, field) or ZERO, s.balance_date) for s in history]
                # History is date-descending; the first occurrence of an extreme wins.
                highest = max(values, key=lambda item: item[0])
                lowest = min(values, key=lambda item: item[0])
                average = sum((value for value, _ in values), ZERO) / len(values)
                trend = BalanceTrendSchema(
                    balance_field=field,
                    period=window.description if window else "available period",
                    samples=len(values),
                    average=money(average),
                    highest=money(highest[0]),
                    highest_date=self._calendar.to_display(highest[1]),
                    lowest=money(lowest[0]),
                    lowest_date=self._calendar.to_display(lowest[1]),
                )
            return AccountBalanceCard(
                query_type=query_type.value,
                snapshot=self._balance_schema(history[0]) if history else None,
                trend=trend,
            )

        latest = await self._store.latest_balance(account_id)
        return AccountBalanceCard(
            query_type=query_type.value,
            snapshot=self._balance_schema(latest) if latest else None,
        )

    async def _fees(self, entities: Entities, anchor: date, tie_break: TieBreak) -> CardPayload:
        fee_type = entities.fee_type or FeeType.COMMISSION
        window = self._period(entities.time_phrase or "this month", anchor, fallback_ytd=False)
        entries = await self._store.fetch_fees(
            self._settings.account_id,
            fee_type,
            date_from=self._calendar.to_store(window.start_date),
            date_to=self._calendar.to_store(window.end_date),
            symbol=entities.symbol,
        )
        total = sum((entry.amount for entry in entries), Decimal("0"))
        return FeesCard(
            fee_type=fee_type.value,
            period=window.description,
            symbol=entities.symbol,
            total_amount=money(total),
            transaction_count=len(entries),
            breakdown=[
                FeeLineSchema(
                    fee_date=self._calendar.to_display(entry.fee_date),
                    amount=money(entry.amount),
                    symbol=entry.symbol,
                )
                for entry in entries[: self._settings.breakdown_limit]
            ],
        )


__all__ = ["CardOrchestrator", "DisplayCalendar", "UnresolvedPeriodError"]
