from __future__ import annotations

import random
from datetime import date
from typing import IO, Iterable, List, Optional

import pandas as pd

from .models import UNCATEGORIZED, SpendingSummary, Transaction

FRAME_COLUMNS = ["id", "date", "amount", "category", "kind", "description"]

_KIND_ALIASES = {
    "expense": "expense",
    "debit": "expense",
    "dr": "expense",
    "spend": "expense",
    "income": "income",
    "credit": "income",
    "cr": "income",
}


def _normalize_dataframe(raw_df: pd.DataFrame) -> pd.DataFrame:
    """Normalize various CSV schemas to the internal schema.

    Expected output columns:
      - id: str
      - date: datetime (midnight)
      - amount: float, always >= 0
      - category: str
      - kind: "income" or "expense"
      - description: Optional[str]

    When no type column is present the sign of the amount decides the kind
    (negative for spending).
    """
    df = raw_df.copy()

    column_map = {
        "Transaction_ID": "id",
        "Transaction_Date": "date",
        "Date": "date",
        "Posting_Date": None,
        "Description": "description",
        "Transaction_Type": "kind",
        "Type": "kind",
        "transaction_type": "kind",
        "Merchant_Category": "category",
        "Category": "category",
        "Amount": "amount",
    }

    rename_dict = {k: v for k, v in column_map.items() if v is not None and k in df.columns}
    df = df.rename(columns=rename_dict)

    if "date" in df.columns:
        df["date"] = pd.to_datetime(df["date"], errors="coerce")
    else:
        date_cols = [c for c in df.columns if "date" in c.lower()]
        if date_cols:
            df["date"] = pd.to_datetime(df[date_cols[0]], errors="coerce")
        else:
            df["date"] = pd.NaT
    df["date"] = df["date"].dt.normalize()

    if "amount" in df.columns:
        df["amount"] = pd.to_numeric(df["amount"], errors="coerce")
    else:
        df["amount"] = pd.NA

    sign_kind = df["amount"].lt(0).map({True: "expense", False: "income"})
    if "kind" in df.columns:
        mapped = df["kind"].astype(str).str.strip().str.lower().map(_KIND_ALIASES)
        df["kind"] = mapped.fillna(sign_kind)
    else:
        df["kind"] = sign_kind
    # inf is treated like a missing amount and dropped below
    df["amount"] = df["amount"].abs().replace(float("inf"), float("nan"))

    if "category" in df.columns:
        df["category"] = df["category"].fillna(UNCATEGORIZED).astype(str).str.strip()
        df.loc[df["category"] == "", "category"] = UNCATEGORIZED
    else:
        df["category"] = UNCATEGORIZED

    if "description" not in df.columns:
        df["description"] = None

    df = df.dropna(subset=["date", "amount"])
    df = df.sort_values("date").reset_index(drop=True)

    if "id" in df.columns:
        df["id"] = df["id"].astype(str)
    else:
        df["id"] = [f"tx_{i}" for i in range(len(df))]

    return df[FRAME_COLUMNS]


def load_user_dataframe(file_obj: IO[bytes]) -> pd.DataFrame:
    """Load a user-uploaded CSV file-like into a normalized DataFrame."""
    file_obj.seek(0)
    raw_df = pd.read_csv(file_obj)
    return _normalize_dataframe(raw_df)


def generate_demo_dataframe(
    today: Optional[date] = None,
    months: int = 6,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Build a synthetic transaction history ending on ``today``.

    The history is anchored on the current date so the recent and prior
    three-month windows always hold data.
    """
    rng = random.Random(seed)
    end = pd.Timestamp(today or date.today()).normalize()
    start = end - pd.DateOffset(months=months)

    rows = []
    for day in pd.date_range(start, end, freq="D"):
        if day.day == 1:
            rows.append((day, 1200.0, "Rent", "expense", "Monthly rent"))
        if day.day == 25:
            rows.append((day, 4200.0, "Salary", "income", "Payroll"))
        if day.day == 15:
            winter = 1.35 if day.month in (12, 1, 2) else 1.0
            rows.append((day, round(rng.uniform(90, 130) * winter, 2), "Utilities", "expense", "Energy bill"))
        if day.day == 8:
            rows.append((day, 15.99, "Subscriptions", "expense", "Streaming service"))
        if day.dayofweek == 5:
            rows.append((day, round(rng.uniform(60, 140), 2), "Groceries", "expense", "Supermarket"))
        if rng.random() < 0.25:
            rows.append((day, round(rng.uniform(12, 55), 2), "Dining", "expense", "Restaurant"))
        if rng.random() < 0.3:
            rows.append((day, round(rng.uniform(3, 25), 2), "Transport", "expense", "Transit"))
        if day.dayofweek == 4 and rng.random() < 0.5:
            rows.append((day, round(rng.uniform(20, 80), 2), "Entertainment", "expense", "Night out"))

    df = pd.DataFrame(rows, columns=["date", "amount", "category", "kind", "description"])
    df["id"] = [f"demo_{i}" for i in range(len(df))]
    return df[FRAME_COLUMNS]


def transactions_to_dataframe(transactions: Iterable[Transaction]) -> pd.DataFrame:
    df = pd.DataFrame([t.model_dump() for t in transactions], columns=FRAME_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    df["amount"] = df["amount"].astype(float)
    return df


def dataframe_to_transactions(df: pd.DataFrame) -> List[Transaction]:
    return [
        Transaction(
            id=str(row.id),
            amount=float(row.amount),
            category=row.category,
            date=pd.Timestamp(row.date).date(),
            kind=row.kind,
            description=None if pd.isna(row.description) else str(row.description),
        )
        for row in df.itertuples(index=False)
    ]


def analyze_dataframe(df: pd.DataFrame) -> SpendingSummary:
    expenses = df[df["kind"] == "expense"]
    income = df[df["kind"] == "income"]

    total_expenses = float(expenses["amount"].sum())
    total_income = float(income["amount"].sum())
    totals = expenses.groupby("category", sort=False)["amount"].sum().sort_values(ascending=False)
    savings_rate = ((total_income - total_expenses) / total_income * 100) if total_income > 0 else 0.0

    return SpendingSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        savings_rate=savings_rate,
        num_transactions=int(len(df)),
        totals_by_category={str(k): float(v) for k, v in totals.items()},
    )
