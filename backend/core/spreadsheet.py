"""
Stock spreadsheets.

One fixed layout is used both ways:

    Item Name | Lot Number | Quantity | Location | Arrival Date | Expiry Date | Document Number

Exports are produced from report rows; imports resolve item and location
names against the catalog and skip (and count) rows that do not make sense.
"""

import csv
import io
import logging
import math
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import settings
from core.dates import parse_day
from schemas.catalog import Location, MasterItem
from schemas.exports import ExportRow, SkippedRow, StockImportResult
from schemas.inventory import WarehouseItemCreate

logger = logging.getLogger(__name__)

STOCK_COLUMNS = [
    "Item Name",
    "Lot Number",
    "Quantity",
    "Location",
    "Arrival Date",
    "Expiry Date",
    "Document Number",
]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class StockImportError(Exception):
    """The uploaded file could not be read as a stock sheet at all."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


def _row_values(row: ExportRow) -> list:
    return [
        row.item_name,
        row.lot_number,
        row.quantity,
        row.location_name,
        row.arrival_date.isoformat(),
        row.expiry_date.isoformat() if row.expiry_date else "",
        row.document_number or "",
    ]


def write_stock_xlsx(rows: Sequence[ExportRow], title: Optional[str] = None) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = (title or settings.export_sheet_title)[:31]

    ws.append(STOCK_COLUMNS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(_row_values(row))

    for idx, header in enumerate(STOCK_COLUMNS, start=1):
        width = max([len(header)] + [len(str(_row_values(r)[idx - 1])) for r in rows])
        ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, 60)
    ws.freeze_panes = "A2"

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def write_stock_csv(rows: Sequence[ExportRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(STOCK_COLUMNS)
    for row in rows:
        writer.writerow(_row_values(row))
    return buf.getvalue()


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        # lot numbers typed as numbers come back as floats from Excel
        return str(int(value))
    return str(value).strip()


def _quantity(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return None
    # "nan" and "inf" parse as floats but are not quantities
    return number if math.isfinite(number) else None


def _day(value: Any) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, (date, datetime)):
        return parse_day(value)
    return parse_day(str(value))


def _parse_rows(
    rows: Iterable[Tuple[int, Sequence[Any]]],
    master_items: Sequence[MasterItem],
    locations: Sequence[Location],
) -> StockImportResult:
    items_by_name = {mi.name.strip().lower(): mi for mi in master_items}
    locs_by_name = {loc.name.strip().lower(): loc for loc in locations}

    result = StockImportResult()

    def skip(row_no: int, reason: str) -> None:
        logger.debug("import row %d skipped: %s", row_no, reason)
        result.skipped_rows.append(SkippedRow(row=row_no, reason=reason))

    for row_no, raw in rows:
        cells = list(raw) + [None] * (len(STOCK_COLUMNS) - len(raw))
        if all(_text(c) == "" for c in cells[: len(STOCK_COLUMNS)]):
            continue
        if len(result.items) + len(result.skipped_rows) >= settings.max_import_rows:
            skip(row_no, "row limit exceeded")
            continue

        name, lot, qty, loc_name, arrival, expiry, doc = cells[: len(STOCK_COLUMNS)]
        mi = items_by_name.get(_text(name).lower())
        if mi is None:
            skip(row_no, f"unknown item {_text(name)!r}")
            continue
        loc = locs_by_name.get(_text(loc_name).lower())
        if loc is None:
            skip(row_no, f"unknown location {_text(loc_name)!r}")
            continue
        lot_number = _text(lot)
        if not lot_number:
            skip(row_no, "missing lot number")
            continue
        quantity = _quantity(qty)
        if quantity is None or quantity <= 0:
            skip(row_no, "quantity must be a positive number")
            continue
        try:
            arrival_date = _day(arrival)
            expiry_date = _day(expiry)
        except ValueError as e:
            skip(row_no, str(e))
            continue
        if arrival_date is None:
            skip(row_no, "missing arrival date")
            continue

        result.items.append(
            WarehouseItemCreate(
                master_item_id=mi.id,
                lot_number=lot_number,
                quantity=quantity,
                location_id=loc.id,
                arrival_date=arrival_date,
                expiry_date=expiry_date,
                document_number=_text(doc) or None,
            )
        )

    result.imported = len(result.items)
    result.skipped = len(result.skipped_rows)
    result.message = f"{result.imported} row(s) imported, {result.skipped} skipped."
    logger.info("stock import: %s", result.message)
    return result


def read_stock_xlsx(
    data: bytes,
    master_items: Sequence[MasterItem],
    locations: Sequence[Location],
    sheet_name: Optional[str] = None,
) -> StockImportResult:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(data), data_only=True)
    except Exception as e:
        raise StockImportError(f"Failed to read Excel file: {e}")

    if sheet_name:
        if sheet_name not in wb.sheetnames:
            raise StockImportError(f"Sheet '{sheet_name}' not found in workbook")
        ws = wb[sheet_name]
    else:
        ws = wb.active

    try:
        rows = enumerate(ws.iter_rows(min_row=2, values_only=True), start=2)
        return _parse_rows(rows, master_items, locations)
    finally:
        wb.close()


def read_stock_csv(
    text: str,
    master_items: Sequence[MasterItem],
    locations: Sequence[Location],
) -> StockImportResult:
    reader = csv.reader(io.StringIO(text))
    rows: List[Tuple[int, List[str]]] = []
    for row_no, row in enumerate(reader, start=1):
        if row_no == 1:
            continue
        rows.append((row_no, row))
    return _parse_rows(rows, master_items, locations)
