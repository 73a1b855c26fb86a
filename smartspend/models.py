from __future__ import annotations

import datetime as dt
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

TransactionKind = Literal["income", "expense"]
TrendDirection = Literal["increasing", "decreasing", "stable"]
RecommendationSource = Literal["ai", "fallback"]

UNCATEGORIZED = "Uncategorized"


class Transaction(BaseModel):
    """A dated money movement; the sign is carried by ``kind``, never by ``amount``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(..., description="Unique transaction identifier")
    amount: float = Field(..., ge=0, allow_inf_nan=False, description="Non-negative magnitude")
    category: str = Field(UNCATEGORIZED, description="Free-text category label")
    date: dt.date
    kind: TransactionKind = Field(..., validation_alias=AliasChoices("kind", "transaction_type"))
    description: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNCATEGORIZED
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class PeriodStats(BaseModel):
    category_totals: Dict[str, float] = Field(default_factory=dict)
    transaction_count: int = 0
    average_transaction_amount: float = 0.0


class CategoryTrend(BaseModel):
    category: str
    direction: TrendDirection
    percent_change: float = 0.0


class TransactionAnalysis(BaseModel):
    """Statistics bundle fed to the prompt composer."""

    recent: PeriodStats
    older: PeriodStats
    trends: Dict[str, CategoryTrend] = Field(default_factory=dict)
    monthly_totals: Dict[str, Dict[str, float]] = Field(default_factory=dict, description="YYYY-MM -> totals")
    monthly_averages: Dict[str, float] = Field(default_factory=dict)
    seasonal_factors: Dict[str, float] = Field(default_factory=dict)
    total_recent_spending: float = 0.0


class CategoryRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    category: str
    suggested_amount: float = Field(..., alias="suggestedAmount", ge=0)
    confidence: float = Field(..., description="0-100 once validated")
    reasoning: str
    trend: TrendDirection
    seasonal_factor: float = Field(..., alias="seasonalFactor", description="0.5-2.0 once validated")

    @field_validator("trend", mode="before")
    @classmethod
    def _normalize_trend(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class BudgetRecommendation(BaseModel):
    """Budget advice returned to the caller.

    Wire names are camelCase to match the JSON shape requested from the
    completion service; ``source`` records whether the advice came from the
    model or from the local fallback.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    total_budget: float = Field(..., alias="totalBudget", ge=0)
    categories: List[CategoryRecommendation]
    savings_rate: float = Field(..., alias="savingsRate")
    emergency_fund: float = Field(..., alias="emergencyFund", ge=0)
    insights: List[str]
    source: RecommendationSource = "ai"
    fallback_reason: Optional[str] = Field(None, alias="fallbackReason")


class SpendingSummary(BaseModel):
    total_income: float = 0.0
    total_expenses: float = 0.0
    balance: float = 0.0
    savings_rate: float = 0.0
    num_transactions: int = 0
    totals_by_category: Dict[str, float] = Field(default_factory=dict)
