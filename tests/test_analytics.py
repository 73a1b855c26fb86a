from datetime import date

import pandas as pd
import pytest

from smartspend.analytics import (
    calculate_budget_variance,
    category_breakdown,
    current_month_spending,
    generate_spending_predictions,
    monthly_income_vs_expenses,
)
from smartspend.data_loader import transactions_to_dataframe


def test_budget_variance_statuses():
    variances = calculate_budget_variance(
        {"Food": 120.0, "Rent": 1000.0, "Fun": 10.0},
        {"Food": 100.0, "Rent": 1000.0, "Fun": 50.0, "Gym": 0.0},
    )

    assert variances["Food"] == {"variance": pytest.approx(20.0), "percentage": pytest.approx(20.0), "status": "over"}
    assert variances["Rent"]["status"] == "on-track"
    assert variances["Fun"]["status"] == "under"
    assert variances["Gym"] == {"variance": 0.0, "percentage": 0.0, "status": "on-track"}


def test_current_month_spending_handles_december(make_tx):
    txs = [make_tx(10, on=date(2023, 12, 31)), make_tx(99, on=date(2024, 1, 1))]

    assert current_month_spending(txs, date(2023, 12, 15)) == {"Food": pytest.approx(10.0)}


def test_spending_predictions_project_to_month_end(make_tx, today):
    txs = [make_tx(100, on=date(2024, 6, 5)), make_tx(50, on=date(2024, 6, 9)), make_tx(500, on=date(2024, 5, 9))]

    predictions = generate_spending_predictions(txs, days_into_month=10, today=date(2024, 6, 10))

    assert predictions == {"Food": pytest.approx(450.0)}


def test_spending_predictions_without_elapsed_days(make_tx, today):
    assert generate_spending_predictions([make_tx(10)], days_into_month=0, today=today) == {}


def test_monthly_income_vs_expenses(make_tx):
    df = transactions_to_dataframe(
        [
            make_tx(1000, "Salary", date(2024, 5, 25), kind="income"),
            make_tx(300, "Rent", date(2024, 5, 1)),
            make_tx(200, "Food", date(2024, 6, 3)),
        ]
    )

    result = monthly_income_vs_expenses(df)

    assert list(result["month"]) == ["2024-05", "2024-06"]
    assert list(result["income"]) == [1000.0, 0.0]
    assert list(result["expenses"]) == [300.0, 200.0]
    assert list(result["savings"]) == [700.0, -200.0]


def test_category_breakdown_percentages(make_tx):
    df = transactions_to_dataframe(
        [make_tx(75, "Food"), make_tx(25, "Fun"), make_tx(500, "Salary", kind="income")]
    )

    result = category_breakdown(df)

    assert list(result["category"]) == ["Food", "Fun"]
    assert list(result["percentage"]) == [pytest.approx(75.0), pytest.approx(25.0)]


def test_empty_frames():
    empty = transactions_to_dataframe([])

    assert monthly_income_vs_expenses(empty).empty
    assert category_breakdown(empty).empty
    assert isinstance(category_breakdown(empty), pd.DataFrame)
