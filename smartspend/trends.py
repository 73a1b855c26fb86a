from __future__ import annotations

from typing import Dict, Mapping

from .models import CategoryTrend

# Policy threshold: changes smaller than this are reported as stable.
STABLE_THRESHOLD_PERCENT = 10.0


def classify_change(percent_change: float) -> str:
    if abs(percent_change) < STABLE_THRESHOLD_PERCENT:
        return "stable"
    return "increasing" if percent_change > 0 else "decreasing"


def calculate_spending_trends(
    recent: Mapping[str, float], older: Mapping[str, float]
) -> Dict[str, CategoryTrend]:
    """Compare recent and prior category totals.

    A category with no prior spending is reported as stable with a 0% change:
    there is not enough history to call it growth.
    """
    trends: Dict[str, CategoryTrend] = {}
    categories = list(dict.fromkeys([*recent.keys(), *older.keys()]))

    for category in categories:
        recent_amount = recent.get(category, 0.0)
        older_amount = older.get(category, 0.0)

        if older_amount == 0:
            trends[category] = CategoryTrend(category=category, direction="stable", percent_change=0.0)
            continue

        change = (recent_amount - older_amount) / older_amount * 100
        trends[category] = CategoryTrend(
            category=category,
            direction=classify_change(change),
            percent_change=change,
        )

    return trends
