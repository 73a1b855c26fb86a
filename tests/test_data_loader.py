import io
from datetime import date

import pytest

from smartspend.data_loader import (
    FRAME_COLUMNS,
    analyze_dataframe,
    dataframe_to_transactions,
    generate_demo_dataframe,
    load_user_dataframe,
    transactions_to_dataframe,
)


def _csv(text):
    return io.BytesIO(text.encode("utf-8"))


def test_signed_amounts_become_magnitude_and_kind():
    df = load_user_dataframe(
        _csv(
            "Transaction_Date,Description,Merchant_Category,Amount\n"
            "2024-06-02,Tesco,Groceries,-45.20\n"
            "2024-06-01,Payroll,Income,2500\n"
        )
    )

    assert list(df.columns) == FRAME_COLUMNS
    assert list(df["kind"]) == ["income", "expense"]
    assert list(df["amount"]) == [2500.0, 45.2]
    assert list(df["id"]) == ["tx_0", "tx_1"]


def test_type_column_wins_over_sign():
    df = load_user_dataframe(
        _csv("date,amount,category,transaction_type\n2024-06-01,30,Food,Debit\n2024-06-02,10,Refund,credit\n")
    )

    assert list(df["kind"]) == ["expense", "income"]


def test_rows_without_date_or_amount_are_dropped_and_blank_category_filled():
    df = load_user_dataframe(_csv("Date,Amount,Category\nnot-a-date,-5,Food\n2024-06-01,,Food\n2024-06-03,-7,\n"))

    assert len(df) == 1
    assert df.iloc[0]["category"] == "Uncategorized"


def test_non_finite_amounts_are_dropped():
    df = load_user_dataframe(_csv("Date,Amount,Category\n2024-06-01,inf,Food\n2024-06-02,-inf,Fun\n2024-06-03,-7,Food\n"))

    assert list(df["amount"]) == [7.0]
    assert len(dataframe_to_transactions(df)) == 1


def test_dataframe_transaction_conversion(make_tx):
    txs = [make_tx(12.5, "Food", date(2024, 6, 1)), make_tx(900, "Salary", date(2024, 6, 2), kind="income")]

    back = dataframe_to_transactions(transactions_to_dataframe(txs))

    assert back == txs


def test_demo_data_is_anchored_on_today():
    df = generate_demo_dataframe(today=date(2024, 6, 30), months=6, seed=1)

    assert df["date"].max().date() <= date(2024, 6, 30)
    assert df["date"].min().date() >= date(2023, 12, 30)
    assert set(df["kind"]) == {"income", "expense"}
    assert (df["amount"] >= 0).all()
    assert df["id"].is_unique
    assert len(dataframe_to_transactions(df)) == len(df)


def test_demo_data_is_reproducible_with_seed():
    first = generate_demo_dataframe(today=date(2024, 6, 30), seed=3)
    second = generate_demo_dataframe(today=date(2024, 6, 30), seed=3)

    assert first.equals(second)


def test_analyze_dataframe_summary(make_tx):
    df = transactions_to_dataframe(
        [make_tx(1000, "Salary", kind="income"), make_tx(150, "Food"), make_tx(50, "Fun")]
    )

    summary = analyze_dataframe(df)

    assert summary.total_income == 1000
    assert summary.total_expenses == 200
    assert summary.balance == 800
    assert summary.savings_rate == pytest.approx(80.0)
    assert summary.num_transactions == 3
    assert list(summary.totals_by_category) == ["Food", "Fun"]
