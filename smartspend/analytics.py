from __future__ import annotations

import calendar
from datetime import date
from typing import Dict, Mapping, Optional, Sequence

import pandas as pd

from .aggregation import category_totals
from .models import Transaction

VARIANCE_TOLERANCE_PERCENT = 10.0


def calculate_budget_variance(
    actual: Mapping[str, float], budgeted: Mapping[str, float]
) -> Dict[str, Dict[str, object]]:
    """Compare actual spending to budget for every budgeted category."""
    variances: Dict[str, Dict[str, object]] = {}
    for category, budget in budgeted.items():
        spent = actual.get(category, 0.0)
        variance = spent - budget
        percentage = variance / budget * 100 if budget > 0 else 0.0

        status = "on-track"
        if percentage > VARIANCE_TOLERANCE_PERCENT:
            status = "over"
        elif percentage < -VARIANCE_TOLERANCE_PERCENT:
            status = "under"

        variances[category] = {"variance": variance, "percentage": percentage, "status": status}
    return variances


def current_month_spending(transactions: Sequence[Transaction], today: Optional[date] = None) -> Dict[str, float]:
    today = today or date.today()
    start = today.replace(day=1)
    end = date(today.year + 1, 1, 1) if today.month == 12 else date(today.year, today.month + 1, 1)
    return category_totals(transactions, start, end)


def generate_spending_predictions(
    transactions: Sequence[Transaction],
    days_into_month: int,
    today: Optional[date] = None,
) -> Dict[str, float]:
    """Project this month's spending per category to the end of the month."""
    if days_into_month <= 0:
        return {}
    today = today or date.today()
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    return {
        category: amount / days_into_month * days_in_month
        for category, amount in current_month_spending(transactions, today).items()
    }


def monthly_income_vs_expenses(df: pd.DataFrame) -> pd.DataFrame:
    """Income, expenses and savings per ``YYYY-MM``, oldest first."""
    columns = ["month", "income", "expenses", "savings"]
    if df.empty:
        return pd.DataFrame(columns=columns)
    frame = df.assign(month=df["date"].dt.strftime("%Y-%m"))
    pivot = frame.pivot_table(index="month", columns="kind", values="amount", aggfunc="sum", fill_value=0.0)
    result = pd.DataFrame(
        {
            "month": pivot.index,
            "income": pivot.get("income", pd.Series(0.0, index=pivot.index)).to_numpy(),
            "expenses": pivot.get("expense", pd.Series(0.0, index=pivot.index)).to_numpy(),
        }
    )
    result["savings"] = result["income"] - result["expenses"]
    return result.sort_values("month").reset_index(drop=True)[columns]


def category_breakdown(df: pd.DataFrame) -> pd.DataFrame:
    """Expense totals per category with their share of all spending."""
    expenses = df[df["kind"] == "expense"]
    if expenses.empty:
        return pd.DataFrame(columns=["category", "amount", "percentage"])
    totals = expenses.groupby("category")["amount"].sum().sort_values(ascending=False)
    result = totals.rename("amount").reset_index()
    result["percentage"] = result["amount"] / result["amount"].sum() * 100
    return result
