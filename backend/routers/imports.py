import json
import logging
import os
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError

from core.spreadsheet import StockImportError, read_stock_csv, read_stock_xlsx
from schemas.catalog import CatalogSnapshot
from schemas.exports import StockImportResult

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_EXTS = {"xlsx", "xlsm"}


@router.post("/stock", response_model=StockImportResult)
async def import_stock(
    file: UploadFile = File(...),
    catalog: str = Form("{}"),
    sheet_name: Optional[str] = Form(None),
):
    """
    Parse an uploaded stock sheet (.xlsx or .csv) into ledger rows.

    `catalog` is a JSON object with `master_items` and `locations`; names in
    the sheet are matched against it case-insensitively. Nothing is stored:
    the parsed items are returned for the caller to load.
    """
    try:
        snapshot = CatalogSnapshot.model_validate(json.loads(catalog or "{}"))
    except (json.JSONDecodeError, ValidationError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid catalog: {e}")

    data = await file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")

    filename = file.filename or ""
    ext = os.path.splitext(filename)[1].lower().lstrip(".")
    try:
        if ext in XLSX_EXTS:
            result = read_stock_xlsx(data, snapshot.master_items, snapshot.locations, sheet_name=sheet_name)
        elif ext == "csv":
            try:
                text = data.decode("utf-8-sig")
            except UnicodeDecodeError:
                raise StockImportError("CSV file must be UTF-8 encoded")
            result = read_stock_csv(text, snapshot.master_items, snapshot.locations)
        else:
            raise StockImportError("File must be .xlsx or .csv")
    except StockImportError as e:
        logger.info("stock import of %r rejected: %s", filename, e.message)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    return result
