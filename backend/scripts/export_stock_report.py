"""
Write a stock report spreadsheet from a JSON snapshot.

The snapshot has the same shape as the /exports/stock request body
(ledger, master_items, categories, locations, filters).

  PYTHONPATH=backend python backend/scripts/export_stock_report.py snapshot.json stock.xlsx
  PYTHONPATH=backend python backend/scripts/export_stock_report.py snapshot.json stock.csv --location loc_main
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from core.export_filter import export_rows
from core.spreadsheet import write_stock_csv, write_stock_xlsx
from schemas.exports import ExportRequest

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Export filtered stock to .xlsx or .csv")
    parser.add_argument("snapshot", help="JSON file with ledger and catalogs")
    parser.add_argument("output", help="Target file; .csv writes CSV, anything else writes Excel")
    parser.add_argument("--location", action="append", default=[], help="Location id to include (repeatable)")
    parser.add_argument("--category", action="append", default=[], help="Category id to include (repeatable)")
    parser.add_argument("--item", default=None, help="Item name substring")
    args = parser.parse_args(argv)

    payload = ExportRequest.model_validate(json.loads(Path(args.snapshot).read_text(encoding="utf-8")))
    filters = payload.filters
    if args.location:
        filters.location_ids = args.location
    if args.category:
        filters.category_ids = args.category
    if args.item is not None:
        filters.item_name = args.item.strip()

    rows = export_rows(payload.ledger, payload.master_items, payload.categories, payload.locations, filters)

    out = Path(args.output)
    if out.suffix.lower() == ".csv":
        out.write_text(write_stock_csv(rows), encoding="utf-8", newline="")
    else:
        out.write_bytes(write_stock_xlsx(rows))

    print(f"[export_stock_report] rows={len(rows)} -> {out}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
