"""Summary tables describing sales patterns in a cleaned transaction table."""

from __future__ import annotations

from typing import Dict

import pandas as pd

from .series import add_revenue

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def describe_transactions(df: pd.DataFrame) -> Dict[str, object]:
    enriched = add_revenue(df)
    return {
        "rows": int(len(enriched)),
        "invoices": int(enriched["Invoice"].nunique()),
        "customers": int(enriched["Customer ID"].nunique()),
        "products": int(enriched["StockCode"].nunique()),
        "countries": int(enriched["Country"].nunique()),
        "first_invoice": enriched["InvoiceDate"].min(),
        "last_invoice": enriched["InvoiceDate"].max(),
        "returns": int(enriched["Quantity"].lt(0).sum()),
        "missing_customers": int(enriched["Customer ID"].isna().sum()),
        "revenue": float(enriched["Revenue"].sum()),
    }


def monthly_revenue(df: pd.DataFrame) -> pd.Series:
    enriched = add_revenue(df)
    monthly = enriched.groupby(enriched["InvoiceDate"].dt.to_period("M"))["Revenue"].sum()
    monthly.index.name = "month"
    return monthly.sort_index()


def revenue_by_weekday(df: pd.DataFrame) -> pd.Series:
    enriched = add_revenue(df)
    by_day = enriched.groupby(enriched["InvoiceDate"].dt.dayofweek)["Revenue"].sum()
    by_day = by_day.reindex(range(7), fill_value=0.0)
    by_day.index = pd.Index(WEEKDAY_NAMES, name="weekday")
    return by_day


def revenue_by_hour(df: pd.DataFrame) -> pd.Series:
    enriched = add_revenue(df)
    by_hour = enriched.groupby(enriched["InvoiceDate"].dt.hour)["Revenue"].sum()
    by_hour.index.name = "hour"
    return by_hour.sort_index()


def top_products(df: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    enriched = add_revenue(df)
    grouped = enriched.groupby("StockCode").agg(
        description=("Description", "first"),
        quantity=("Quantity", "sum"),
        revenue=("Revenue", "sum"),
    )
    return grouped.sort_values("revenue", ascending=False).head(n)


def revenue_by_country(df: pd.DataFrame, n: int = 10) -> pd.Series:
    enriched = add_revenue(df)
    return enriched.groupby("Country")["Revenue"].sum().sort_values(ascending=False).head(n)
