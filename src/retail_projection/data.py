import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: Sequence[str] = (
    "Invoice",
    "StockCode",
    "Description",
    "Quantity",
    "InvoiceDate",
    "Price",
    "Customer ID",
    "Country",
)

# Headers used by the 2010-2011 "Online Retail" release.
COLUMN_ALIASES: Dict[str, str] = {
    "InvoiceNo": "Invoice",
    "UnitPrice": "Price",
    "CustomerID": "Customer ID",
}

EXCEL_SUFFIXES = (".xlsx", ".xls")


def _read_raw(path: Path, encoding: Optional[str]) -> pd.DataFrame:
    if path.suffix.lower() in EXCEL_SUFFIXES:
        sheets = pd.read_excel(path, sheet_name=None)
        return pd.concat(sheets.values(), ignore_index=True)
    return pd.read_csv(path, encoding=encoding, low_memory=False)


def load_transactions(path: Path, encoding: Optional[str] = None) -> pd.DataFrame:
    """Read a transaction log (CSV or workbook) into the canonical schema.

    Rows whose quantity, price or invoice date cannot be parsed are dropped
    rather than imputed.
    """
    path = Path(path)
    df = _read_raw(path, encoding)
    df = df.rename(columns={col: str(col).strip() for col in df.columns})
    df = df.rename(columns=COLUMN_ALIASES)

    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Transaction data missing required columns: {sorted(missing)}")

    loaded = df[list(REQUIRED_COLUMNS)].copy()
    loaded["Quantity"] = pd.to_numeric(loaded["Quantity"], errors="coerce")
    loaded["Price"] = pd.to_numeric(loaded["Price"], errors="coerce")
    loaded["InvoiceDate"] = pd.to_datetime(loaded["InvoiceDate"], errors="coerce")
    # Fractional quantities are unresolvable, not truncated.
    loaded.loc[loaded["Quantity"] % 1 != 0, "Quantity"] = np.nan

    before = len(loaded)
    loaded = loaded.dropna(subset=["Quantity", "Price", "InvoiceDate"])
    dropped = before - len(loaded)
    if dropped:
        logger.warning(f"Dropped {dropped} rows with unresolvable quantity, price or invoice date")

    loaded["Quantity"] = loaded["Quantity"].astype("int64")
    loaded["Price"] = loaded["Price"].astype(float)
    loaded["Invoice"] = loaded["Invoice"].astype(str).str.strip()
    loaded["StockCode"] = loaded["StockCode"].astype(str).str.strip()

    logger.info(f"Loaded {len(loaded)} transactions from {path}")
    return loaded.reset_index(drop=True)


def save_cleaned(df: pd.DataFrame, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, columns=list(REQUIRED_COLUMNS))
    logger.info(f"Saved {len(df)} cleaned transactions to {path}")
    return path


def default_cleaned_path(raw_path: Path) -> Path:
    raw_path = Path(raw_path)
    return raw_path.with_name(f"{raw_path.stem}_cleaned.csv")
