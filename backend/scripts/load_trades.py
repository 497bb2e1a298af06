"""Load a JSON export of broker trade rows into the trade-record store."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from app.config import get_settings
from app.core.logging import setup_logging
from app.db.init import init_database
from app.db.session import _session_factory
from app.services.trade_import import import_trade_rows


async def _run(seed_path: Path, account_id: str) -> None:
    rows = json.loads(seed_path.read_text())
    await init_database()
    async with _session_factory() as session:
        count = await import_trade_rows(session, account_id, rows)
        print(f"Loaded {count} of {len(rows)} trade rows from {seed_path}")


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Load broker trade rows into the trade_data table")
    parser.add_argument("seed_file", type=Path)
    parser.add_argument("--account", default=settings.account_id)
    args = parser.parse_args()
    if not args.seed_file.exists():
        raise SystemExit(f"Seed file not found: {args.seed_file}")
    setup_logging(settings.log_level)
    asyncio.run(_run(args.seed_file, args.account))


if __name__ == "__main__":
    main()
