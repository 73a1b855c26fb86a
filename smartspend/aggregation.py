"""Category and calendar-month aggregation of transactions."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Mapping, Optional, Sequence

import pandas as pd

from .data_loader import transactions_to_dataframe
from .models import PeriodStats, Transaction, TransactionAnalysis
from .trends import calculate_spending_trends

RECENT_WINDOW_DAYS = 90
OLDER_WINDOW_DAYS = 180
SEASONAL_FACTOR_MIN = 0.5
SEASONAL_FACTOR_MAX = 2.0


def _expenses_in_window(transactions: Sequence[Transaction], start: date, end: date) -> pd.DataFrame:
    """Expense rows with ``start <= date < end``."""
    df = transactions_to_dataframe(transactions)
    mask = (df["kind"] == "expense") & (df["date"] >= pd.Timestamp(start)) & (df["date"] < pd.Timestamp(end))
    return df[mask]


def _totals(df: pd.DataFrame) -> Dict[str, float]:
    if df.empty:
        return {}
    grouped = df.groupby("category", sort=False)["amount"].sum()
    return {str(category): float(amount) for category, amount in grouped.items()}


def category_totals(transactions: Sequence[Transaction], start: date, end: date) -> Dict[str, float]:
    """Sum expense amounts per category within ``[start, end)``.

    Categories without spending in the window are absent, not zero-filled.
    """
    return _totals(_expenses_in_window(transactions, start, end))


def monthly_category_totals(
    transactions: Sequence[Transaction], start: date, end: date
) -> Dict[str, Dict[str, float]]:
    """Category totals bucketed by ``YYYY-MM`` within ``[start, end)``."""
    df = _expenses_in_window(transactions, start, end)
    if df.empty:
        return {}
    months = df["date"].dt.strftime("%Y-%m")
    return {str(month): _totals(group) for month, group in df.groupby(months, sort=True)}


def period_stats(transactions: Sequence[Transaction], start: date, end: date) -> PeriodStats:
    df = _expenses_in_window(transactions, start, end)
    count = int(len(df))
    return PeriodStats(
        category_totals=_totals(df),
        transaction_count=count,
        average_transaction_amount=float(df["amount"].mean()) if count else 0.0,
    )


def monthly_averages(monthly_totals: Mapping[str, Mapping[str, float]]) -> Dict[str, float]:
    """Average each category over the months that hold any spending."""
    month_count = len(monthly_totals) or 1
    sums: Dict[str, float] = {}
    for totals in monthly_totals.values():
        for category, amount in totals.items():
            sums[category] = sums.get(category, 0.0) + amount
    return {category: amount / month_count for category, amount in sums.items()}


def seasonal_factors(transactions: Sequence[Transaction], today: Optional[date] = None) -> Dict[str, float]:
    """Ratio of this calendar month's spending to the category's monthly norm.

    The norm is all-time spending for the category spread over twelve
    months; results are clipped to the 0.5-2.0 band.
    """
    today = today or date.today()
    df = transactions_to_dataframe(transactions)
    df = df[df["kind"] == "expense"]
    if df.empty:
        return {}

    by_month = df.groupby([df["date"].dt.month, "category"])["amount"].sum()
    if today.month not in by_month.index.get_level_values(0):
        return {}

    yearly_norm = by_month.groupby(level="category").sum() / 12
    factors: Dict[str, float] = {}
    for category, amount in by_month.loc[today.month].items():
        norm = float(yearly_norm.get(category, 0.0))
        factor = float(amount) / norm if norm > 0 else 1.0
        factors[str(category)] = min(max(factor, SEASONAL_FACTOR_MIN), SEASONAL_FACTOR_MAX)
    return factors


def recent_window(today: date) -> tuple[date, date]:
    """Last 90 days, today included."""
    return today - timedelta(days=RECENT_WINDOW_DAYS), today + timedelta(days=1)


def older_window(today: date) -> tuple[date, date]:
    """The 90 days before the recent window."""
    return today - timedelta(days=OLDER_WINDOW_DAYS), today - timedelta(days=RECENT_WINDOW_DAYS)


def analyze_transaction_patterns(
    transactions: Sequence[Transaction], today: Optional[date] = None
) -> TransactionAnalysis:
    today = today or date.today()
    recent_start, recent_end = recent_window(today)
    older_start, older_end = older_window(today)

    recent = period_stats(transactions, recent_start, recent_end)
    older = period_stats(transactions, older_start, older_end)
    monthly = monthly_category_totals(transactions, recent_start, recent_end)

    return TransactionAnalysis(
        recent=recent,
        older=older,
        trends=calculate_spending_trends(recent.category_totals, older.category_totals),
        monthly_totals=monthly,
        monthly_averages=monthly_averages(monthly),
        seasonal_factors=seasonal_factors(transactions, today),
        total_recent_spending=sum(recent.category_totals.values()),
    )
