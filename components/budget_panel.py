"""Budget Recommendation Panel

Renders a BudgetRecommendation inside the dashboard:
- Provenance badge (AI advice vs. local fallback)
- Headline metrics: total budget, savings rate, emergency fund
- Per-category table with confidence and trend
- Insights list and variance against this month's actual spending
"""

from __future__ import annotations

from typing import Dict, Optional

import pandas as pd
import streamlit as st

from smartspend.analytics import calculate_budget_variance
from smartspend.models import BudgetRecommendation

TREND_ICONS = {"increasing": "📈", "decreasing": "📉", "stable": "➡️"}
STATUS_ICONS = {"over": "🔴", "under": "🟢", "on-track": "🟡"}


class BudgetPanel:
    """Keeps the latest recommendation in session state and renders it."""

    def __init__(self, currency: str):
        self.currency = currency
        self._init_session_state()

    def _init_session_state(self) -> None:
        if "budget_recommendation" not in st.session_state:
            st.session_state.budget_recommendation = None

    def set_recommendation(self, recommendation: Optional[BudgetRecommendation]) -> None:
        st.session_state.budget_recommendation = recommendation

    def get_recommendation(self) -> Optional[BudgetRecommendation]:
        return st.session_state.budget_recommendation

    def clear(self) -> None:
        st.session_state.budget_recommendation = None

    def render(self, actual_spending: Dict[str, float]) -> None:
        recommendation = self.get_recommendation()
        if recommendation is None:
            st.info("Generate a budget to see category recommendations here.")
            return

        self._render_provenance(recommendation)
        self._render_headline(recommendation)
        self._render_categories(recommendation)
        self._render_insights(recommendation)
        self._render_variance(recommendation, actual_spending)

    def _render_provenance(self, recommendation: BudgetRecommendation) -> None:
        if recommendation.source == "ai":
            st.success("✨ AI-generated budget recommendation")
        else:
            reason = recommendation.fallback_reason or "AI service unavailable"
            st.warning(f"📄 Using a budget based on your recent averages ({reason})")

    def _render_headline(self, recommendation: BudgetRecommendation) -> None:
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric(label="Monthly Budget", value=f"{self.currency}{recommendation.total_budget:,.2f}")
        with col2:
            st.metric(label="Savings Rate", value=f"{recommendation.savings_rate:.0f}%")
        with col3:
            st.metric(label="Emergency Fund", value=f"{self.currency}{recommendation.emergency_fund:,.2f}")

    def _render_categories(self, recommendation: BudgetRecommendation) -> None:
        if not recommendation.categories:
            st.caption("No recent spending to budget for yet.")
            return
        rows = [
            {
                "Category": cat.category,
                "Suggested": f"{self.currency}{cat.suggested_amount:,.2f}",
                "Confidence": f"{cat.confidence:.0f}%",
                "Trend": f"{TREND_ICONS.get(cat.trend, '')} {cat.trend}",
                "Seasonal": f"{cat.seasonal_factor:.2f}x",
                "Why": cat.reasoning,
            }
            for cat in recommendation.categories
        ]
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

    def _render_insights(self, recommendation: BudgetRecommendation) -> None:
        if not recommendation.insights:
            return
        st.markdown("**Insights**")
        for insight in recommendation.insights:
            st.markdown(f"• {insight}")

    def _render_variance(self, recommendation: BudgetRecommendation, actual_spending: Dict[str, float]) -> None:
        budgeted = {cat.category: cat.suggested_amount for cat in recommendation.categories}
        if not budgeted:
            return
        variances = calculate_budget_variance(actual_spending, budgeted)
        st.markdown("**This Month vs. Budget**")
        rows = [
            {
                "Category": category,
                "Spent": f"{self.currency}{actual_spending.get(category, 0.0):,.2f}",
                "Budget": f"{self.currency}{budgeted[category]:,.2f}",
                "Variance": f"{result['percentage']:+.1f}%",
                "Status": f"{STATUS_ICONS[result['status']]} {result['status']}",
            }
            for category, result in variances.items()
        ]
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)
