"""Load broker trade exports into the ``trade_data`` table."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import TradeRow
from trade_insights.models import Direction, OptionRight, SecurityClass, TradeRecord

logger = logging.getLogger(__name__)


def trade_row_from_record(account_id: str, record: TradeRecord) -> TradeRow:
    """Map a parsed record back onto the store's single-letter codes."""

    is_option = record.is_option
    return TradeRow(
        trade_id=record.trade_id,
        account_code=account_id,
        trade_date=record.trade_date,
        symbol=record.symbol,
        underlying_symbol=record.underlying_symbol,
        security_type="O" if record.security_class is SecurityClass.OPTION else "S",
        trade_type="B" if record.direction is Direction.BUY else "S",
        stock_trade_price=None if is_option else record.unit_price,
        stock_share_qty=None if is_option else record.quantity,
        option_trade_premium=record.unit_price if is_option else None,
        option_contracts=record.quantity if is_option else None,
        strike=record.strike,
        expiration=record.expiration,
        call_put={OptionRight.CALL: "C", OptionRight.PUT: "P"}.get(record.option_right),
        gross_amount=record.gross_amount,
        net_amount=record.net_amount,
        commission=record.commission,
    )


async def import_trade_rows(
    session: AsyncSession,
    account_id: str,
    rows: Iterable[Mapping[str, Any]],
) -> int:
    """Insert every readable row and commit; unreadable rows are logged and skipped."""

    inserted = 0
    for index, row in enumerate(rows):
        try:
            record = TradeRecord.from_row(row)
        except ValueError as exc:
            logger.warning("Skipping trade row %d: %s", index, exc)
            continue
        session.add(trade_row_from_record(account_id, record))
        inserted += 1
    await session.commit()
    logger.info("Imported %d trade rows for account %s", inserted, account_id)
    return inserted


__all__ = ["import_trade_rows", "trade_row_from_record"]
