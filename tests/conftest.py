"""
Shared fixtures for the retail projection tests.

All data is synthetic; nothing here reads the real transaction log.
"""

import numpy as np
import pandas as pd
import pytest

from retail_projection.data import REQUIRED_COLUMNS


def _row(**overrides):
    row = {
        "Invoice": "489434",
        "StockCode": "85048",
        "Description": "CREAM CUPID HEARTS COAT HANGER",
        "Quantity": 12,
        "InvoiceDate": pd.Timestamp("2011-11-01 10:00"),
        "Price": 2.55,
        "Customer ID": 13085.0,
        "Country": "United Kingdom",
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_transactions():
    """Build a transaction frame from partial rows, filling the other columns with defaults."""

    def _make(*rows):
        frame = pd.DataFrame([_row(**row) for row in rows], columns=list(REQUIRED_COLUMNS))
        frame["InvoiceDate"] = pd.to_datetime(frame["InvoiceDate"])
        return frame

    return _make


@pytest.fixture
def synthetic_transactions():
    """Daily sales from 2011-10-01 to 2011-12-09 with a weekly pattern and a few returns."""
    rng = np.random.default_rng(42)
    rows = []
    invoice = 500000
    for day in pd.date_range("2011-10-01", "2011-12-09", freq="D"):
        lines = 3 + (day.dayofweek < 5) * 2
        for line in range(lines):
            invoice += 1
            rows.append(
                _row(
                    Invoice=str(invoice),
                    StockCode=f"2{line:04d}",
                    Quantity=int(rng.integers(1, 24)),
                    InvoiceDate=day + pd.Timedelta(hours=9 + line),
                    Price=float(rng.choice([0.85, 1.25, 2.55, 4.95])),
                    **{"Customer ID": float(12000 + line)},
                )
            )
    sales = pd.DataFrame(rows)

    # One matched return and one return whose sale predates the log.
    first_sale = sales.iloc[0]
    returns = pd.DataFrame(
        [
            _row(
                Invoice="C600001",
                StockCode=first_sale["StockCode"],
                Quantity=-int(first_sale["Quantity"]),
                InvoiceDate=first_sale["InvoiceDate"] + pd.Timedelta(days=3),
                Price=first_sale["Price"],
                **{"Customer ID": first_sale["Customer ID"]},
            ),
            _row(Invoice="C600002", StockCode="99999", Quantity=-7, InvoiceDate=pd.Timestamp("2011-10-20 12:00")),
        ]
    )
    frame = pd.concat([sales, returns], ignore_index=True)
    frame["InvoiceDate"] = pd.to_datetime(frame["InvoiceDate"])
    return frame[list(REQUIRED_COLUMNS)]


@pytest.fixture
def raw_csv(tmp_path, synthetic_transactions):
    """Write the synthetic log as a raw CSV, with one unparseable quantity."""
    raw = synthetic_transactions.copy()
    raw["InvoiceDate"] = raw["InvoiceDate"].dt.strftime("%Y-%m-%d %H:%M:%S")
    raw["Quantity"] = raw["Quantity"].astype(object)
    raw.loc[5, "Quantity"] = "n/a"
    path = tmp_path / "online_retail.csv"
    raw.to_csv(path, index=False)
    return path


@pytest.fixture
def daily_series():
    """120 days of revenue with a trend, a weekly cycle and noise."""
    rng = np.random.default_rng(7)
    index = pd.date_range("2011-06-01", periods=120, freq="D")
    t = np.arange(len(index))
    weekly = np.array([120.0, 80.0, 60.0, 40.0, 20.0, -100.0, -220.0])[index.dayofweek]
    values = 1000.0 + 2.0 * t + weekly + rng.normal(0, 25, len(index))
    series = pd.Series(values, index=index, name="revenue")
    series.index.name = "ds"
    return series
