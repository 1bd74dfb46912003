import logging
from typing import List

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response

from core.export_filter import export_rows
from core.spreadsheet import XLSX_MEDIA_TYPE, write_stock_csv, write_stock_xlsx
from schemas.exports import ExportRequest, ExportRow

logger = logging.getLogger(__name__)

router = APIRouter()


def _rows(payload: ExportRequest) -> List[ExportRow]:
    return export_rows(
        payload.ledger,
        payload.master_items,
        payload.categories,
        payload.locations,
        payload.filters,
    )


@router.post("/stock", response_model=List[ExportRow])
async def export_stock(payload: ExportRequest):
    """
    Stock report rows.

    Empty filter lists mean "all"; several ids inside one filter are OR-ed,
    different filters are AND-ed.
    """
    return _rows(payload)


@router.post("/stock.xlsx")
async def export_stock_xlsx(payload: ExportRequest):
    rows = _rows(payload)
    try:
        data = write_stock_xlsx(rows)
    except Exception as e:
        logger.exception("export_stock_xlsx failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to build Excel file: {e}")
    return Response(
        content=data,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="stock.xlsx"'},
    )


@router.post("/stock.csv")
async def export_stock_csv(payload: ExportRequest):
    return Response(
        content=write_stock_csv(_rows(payload)),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="stock.csv"'},
    )
