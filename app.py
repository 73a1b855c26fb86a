from __future__ import annotations

from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from components.budget_panel import BudgetPanel
from smartspend.advisor import create_advisor
from smartspend.analytics import (
    category_breakdown,
    current_month_spending,
    generate_spending_predictions,
    monthly_income_vs_expenses,
)
from smartspend.config import AppConfig, load_config
from smartspend.data_loader import (
    analyze_dataframe,
    dataframe_to_transactions,
    generate_demo_dataframe,
    load_user_dataframe,
)
from smartspend.errors import InvalidInput
from smartspend.logging import get_logger


def get_accessible_colors():
    """Return a palette of accessible colors that work well together and are colorblind-friendly."""
    return {
        'income': 'rgba(76, 175, 80, 0.7)',      # Accessible green
        'spending': 'rgba(244, 67, 54, 0.7)',    # Accessible red
        'balance': 'rgba(33, 150, 243, 1)',      # Accessible blue
        'grid': 'rgba(128, 128, 128, 0.4)',     # Semi-transparent gray
        'primary': '#4CAF50',
        'secondary': 'rgba(255, 193, 7, 0.8)',
        'tertiary': 'rgba(156, 39, 176, 0.7)',
    }

APP_NAME: str = "SmartSpend"
TAGLINE: str = "Budgets that follow how you actually spend"
DEFAULT_MONTHLY_INCOME: float = 4200.0

logger = get_logger("smartspend.app")


def set_page_config() -> None:
    """Configure Streamlit page settings early to avoid layout shifts."""
    st.set_page_config(
        page_title=f"{APP_NAME} · Budget Advisor",
        page_icon="💰",
        layout="wide",
        initial_sidebar_state="expanded",
    )


def init_session_state(config: AppConfig) -> None:
    """Initialize Streamlit session state variables used across the app."""
    defaults = {
        "data_source": "Demo Data",
        "currency": config.currency,
        "monthly_income": DEFAULT_MONTHLY_INCOME,
        "df": None,
        "advisor": None,
        "budget_panel": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def init_budget_components(config: AppConfig) -> None:
    """Create the advisor once per session so its request limits persist across reruns."""
    if st.session_state.get("advisor") is None:
        st.session_state["advisor"] = create_advisor(config)
    if st.session_state.get("budget_panel") is None:
        st.session_state["budget_panel"] = BudgetPanel(currency=st.session_state["currency"])


def render_header() -> None:
    """Render the application header with title and tagline."""
    st.markdown(
        f"""
        <div style="display:flex; align-items:center; gap:12px;">
            <div style="font-size:1.8rem">💰</div>
            <div>
                <div style="font-size:1.6rem; font-weight:700; letter-spacing:0.2px;">{APP_NAME}</div>
                <div style="opacity:0.8; margin-top:2px;">{TAGLINE}</div>
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )
    st.divider()


def render_sidebar() -> None:
    """Render the sidebar controls for data source, income and currency."""
    with st.sidebar:
        st.markdown("### Settings")

        source = st.radio("Data source", options=["Demo Data", "Upload CSV"], key="data_source")
        if source == "Upload CSV":
            uploaded = st.file_uploader("Transactions CSV", type=["csv"])
            if uploaded is not None:
                try:
                    st.session_state["df"] = load_user_dataframe(uploaded)
                except (ValueError, pd.errors.ParserError) as exc:
                    st.error(f"Could not read CSV: {exc}")
        elif st.session_state.get("df") is None:
            st.session_state["df"] = generate_demo_dataframe(seed=7)

        st.number_input("Monthly income", min_value=0.0, step=100.0, key="monthly_income")
        st.text_input("Currency", key="currency")

        st.markdown("---")
        st.markdown("### Reset")
        if st.button("🔄 Start Over", use_container_width=True, help="Clear data and recommendation"):
            st.session_state["df"] = None
            panel = st.session_state.get("budget_panel")
            if panel:
                panel.clear()
            st.rerun()


def render_metrics_row(df: pd.DataFrame) -> None:
    """Render a responsive row of financial metric cards."""
    currency = st.session_state["currency"]
    summary = analyze_dataframe(df)
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric(label="Total Income", value=f"{currency}{summary.total_income:,.2f}")
    with col2:
        st.metric(label="Total Expenses", value=f"{currency}{summary.total_expenses:,.2f}")
    with col3:
        st.metric(label="Balance", value=f"{currency}{summary.balance:,.2f}")
    with col4:
        st.metric(label="Savings Rate", value=f"{summary.savings_rate:.1f}%")


def render_visualizations_section(df: pd.DataFrame) -> None:
    """Render monthly cash-flow and category charts."""
    with st.container(border=True):
        st.markdown("### Spending Overview 🎯")
        colors = get_accessible_colors()
        currency = st.session_state["currency"]

        monthly = monthly_income_vs_expenses(df)
        if not monthly.empty:
            fig = go.Figure()
            fig.add_trace(go.Bar(x=monthly["month"], y=monthly["income"], name="Income",
                                 marker_color=colors['income']))
            fig.add_trace(go.Bar(x=monthly["month"], y=monthly["expenses"], name="Expenses",
                                 marker_color=colors['spending']))
            fig.add_trace(go.Scatter(x=monthly["month"], y=monthly["savings"], name="Savings",
                                     mode="lines+markers", line=dict(color=colors['balance'], width=3)))
            fig.update_layout(
                height=400,
                barmode="group",
                hovermode="x unified",
                yaxis_title=f"Amount ({currency})",
                legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
                plot_bgcolor="rgba(0,0,0,0)",
                paper_bgcolor="rgba(0,0,0,0)",
            )
            fig.update_yaxes(showgrid=True, gridwidth=1, gridcolor=colors['grid'])
            st.plotly_chart(fig, use_container_width=True)

        breakdown = category_breakdown(df)
        if breakdown.empty:
            st.info("No spending transactions to build a category breakdown.")
            return

        left_col, right_col = st.columns([1, 2])
        with left_col:
            top = breakdown.iloc[0]
            st.metric(label="Total Categories", value=len(breakdown))
            st.metric(label="Top Category", value=top["category"], delta=f"{currency}{top['amount']:,.0f}")
            st.metric(label="Top Category %", value=f"{top['percentage']:.1f}%")
        with right_col:
            palette = [colors['primary'], colors['secondary'], colors['tertiary'],
                       colors['income'], colors['spending'], colors['balance']]
            cat_fig = px.pie(breakdown, names="category", values="amount",
                             title="Share of Spending by Category", hole=0.4,
                             color_discrete_sequence=palette)
            cat_fig.update_traces(textposition="inside", textinfo="percent+label")
            cat_fig.update_layout(height=360, margin=dict(l=20, r=20, t=50, b=20))
            st.plotly_chart(cat_fig, use_container_width=True)


def render_budget_section(df: pd.DataFrame) -> None:
    """Render the budget advisor: generate action, recommendation and month-end projection."""
    advisor = st.session_state["advisor"]
    panel: BudgetPanel = st.session_state["budget_panel"]
    panel.currency = st.session_state["currency"]
    transactions = dataframe_to_transactions(df)

    with st.container(border=True):
        col1, col2 = st.columns([3, 1])
        with col1:
            st.markdown("### Budget Advisor 🧮")
            st.caption("Recommendations use your last six months of spending and your monthly income.")
        with col2:
            if st.button("🚀 Generate Budget", type="primary", use_container_width=True):
                with st.spinner("Analyzing your spending..."):
                    try:
                        recommendation = advisor.recommend(
                            transactions,
                            st.session_state["monthly_income"],
                            st.session_state["currency"],
                        )
                    except InvalidInput as exc:
                        logger.warning("Rejected budget request: %s", exc)
                        st.error(f"Cannot build a budget from this data: {exc}")
                    else:
                        panel.set_recommendation(recommendation)

        panel.render(current_month_spending(transactions))

        today = date.today()
        predictions = generate_spending_predictions(transactions, today.day, today)
        if predictions:
            st.markdown("**Projected Month-End Spending**")
            projection = pd.DataFrame(
                sorted(predictions.items(), key=lambda item: item[1], reverse=True),
                columns=["Category", "Projected"],
            )
            st.dataframe(projection, hide_index=True, use_container_width=True)


def render_footer() -> None:
    """Render a subtle footer."""
    st.divider()
    st.caption(f"Built with Streamlit · data as of {date.today():%d %b %Y}")


def main() -> None:
    """Application entry point."""
    set_page_config()

    config = load_config()
    init_session_state(config)
    init_budget_components(config)

    render_header()
    render_sidebar()

    df = st.session_state.get("df")
    if df is None or df.empty:
        st.info("Upload a CSV of transactions or switch to demo data to get started.")
        render_footer()
        return

    render_metrics_row(df)
    render_visualizations_section(df)
    render_budget_section(df)
    render_footer()


if __name__ == "__main__":
    main()
