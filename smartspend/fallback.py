from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from .aggregation import category_totals, recent_window
from .models import BudgetRecommendation, CategoryRecommendation, Transaction

FALLBACK_MONTHS = 3
CATEGORY_GROWTH_ALLOWANCE = 1.1
CATEGORY_INCOME_CAP = 0.15
TOTAL_INCOME_CAP = 0.7
FALLBACK_CONFIDENCE = 70.0
FALLBACK_SAVINGS_RATE = 20.0

FALLBACK_INSIGHTS = (
    "Budget based on your recent spending patterns",
    "Consider the 50/30/20 rule: 50% needs, 30% wants, 20% savings",
    "Build an emergency fund of 3-6 months of expenses",
    "Review and adjust your budget monthly based on actual spending",
)


def fallback_recommendation(
    transactions: Sequence[Transaction],
    monthly_income: float,
    today: Optional[date] = None,
    reason: Optional[str] = None,
) -> BudgetRecommendation:
    """Budget derived from the last three months of spending, no model involved.

    The result is not passed through ``validate_recommendation``: the
    emergency fund is three months of average spending, so it can sit below
    ``total_budget * 3`` once the 10% growth allowance is applied.
    """
    monthly_income = max(monthly_income, 0.0)
    start, end = recent_window(today or date.today())
    spending = category_totals(transactions, start, end)
    monthly_total = sum(spending.values()) / FALLBACK_MONTHS

    categories = []
    for category, amount in spending.items():
        monthly_amount = amount / FALLBACK_MONTHS
        categories.append(
            CategoryRecommendation(
                category=category,
                suggested_amount=min(monthly_amount * CATEGORY_GROWTH_ALLOWANCE, monthly_income * CATEGORY_INCOME_CAP),
                confidence=FALLBACK_CONFIDENCE,
                reasoning=f"Based on your average spending of {monthly_amount:,.2f} per month in this category",
                trend="stable",
                seasonal_factor=1.0,
            )
        )

    return BudgetRecommendation(
        total_budget=min(monthly_total * CATEGORY_GROWTH_ALLOWANCE, monthly_income * TOTAL_INCOME_CAP),
        categories=categories,
        savings_rate=FALLBACK_SAVINGS_RATE,
        emergency_fund=monthly_total * 3,
        insights=list(FALLBACK_INSIGHTS),
        source="fallback",
        fallback_reason=reason,
    )
