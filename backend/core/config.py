import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _csv_env(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.split(",") if x.strip()]


class Settings:
    app_name: str = os.getenv("APP_NAME", "Brewery Operations API")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    cors_origins: List[str] = _csv_env("CORS_ORIGINS", "*")

    # Ledger rows at or below this quantity are treated as empty and dropped.
    unload_epsilon: float = float(os.getenv("UNLOAD_EPSILON", "0.001"))

    # Spreadsheet import/export
    export_sheet_title: str = os.getenv("EXPORT_SHEET_TITLE", "Stock")
    max_import_rows: int = int(os.getenv("MAX_IMPORT_ROWS", "5000"))


settings = Settings()
