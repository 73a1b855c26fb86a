"""Parsing and policy enforcement for untrusted budget recommendations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar, Union

from pydantic import ValidationError

from .errors import MalformedRecommendation
from .models import BudgetRecommendation

T = TypeVar("T")

MAX_BUDGET_SHARE = 0.8
MIN_SAVINGS_RATE = 10.0
EMERGENCY_FUND_MONTHS = 3
CONFIDENCE_RANGE = (0.0, 100.0)
SEASONAL_FACTOR_RANGE = (0.5, 2.0)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: MalformedRecommendation

    def is_ok(self) -> bool:
        return False


ParseResult = Union[Ok[BudgetRecommendation], Err]


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```") and cleaned.endswith("```"):
        lines = cleaned.split("\n")
        cleaned = "\n".join(lines[1:-1]) if len(lines) > 2 else cleaned.strip("`")
    return cleaned.strip()


def _build(payload: Any) -> BudgetRecommendation:
    if not isinstance(payload, Mapping):
        raise MalformedRecommendation(f"Expected a JSON object, got {type(payload).__name__}")
    try:
        return BudgetRecommendation.model_validate(dict(payload))
    except ValidationError as exc:
        raise MalformedRecommendation(
            f"Recommendation failed schema validation ({exc.error_count()} errors)"
        ) from exc


def parse_recommendation(raw: str) -> ParseResult:
    """Decode completion text into a BudgetRecommendation without raising."""
    if not isinstance(raw, str) or not raw.strip():
        return Err(MalformedRecommendation("Empty completion response"))
    try:
        payload = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError as exc:
        error = MalformedRecommendation(f"Completion is not valid JSON: {exc.msg}")
        error.__cause__ = exc
        return Err(error)
    try:
        return Ok(_build(payload))
    except MalformedRecommendation as exc:
        return Err(exc)


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return min(max(value, low), high)


def validate_recommendation(
    candidate: Union[BudgetRecommendation, Mapping[str, Any]],
    monthly_income: float,
) -> BudgetRecommendation:
    """Return a copy of ``candidate`` that satisfies the budget-safety rules.

    Raises MalformedRecommendation when a raw mapping does not match the
    recommendation schema.
    """
    recommendation = candidate if isinstance(candidate, BudgetRecommendation) else _build(candidate)

    total_budget = recommendation.total_budget
    categories = list(recommendation.categories)

    max_budget = monthly_income * MAX_BUDGET_SHARE
    if total_budget > max_budget:
        reduction = max_budget / total_budget
        categories = [
            cat.model_copy(update={"suggested_amount": cat.suggested_amount * reduction}) for cat in categories
        ]
        total_budget = max_budget

    savings_rate = max(recommendation.savings_rate, MIN_SAVINGS_RATE)
    emergency_fund = max(recommendation.emergency_fund, total_budget * EMERGENCY_FUND_MONTHS)

    categories = [
        cat.model_copy(
            update={
                "confidence": _clamp(cat.confidence, CONFIDENCE_RANGE),
                "seasonal_factor": _clamp(cat.seasonal_factor, SEASONAL_FACTOR_RANGE),
            }
        )
        for cat in categories
    ]

    return recommendation.model_copy(
        update={
            "total_budget": total_budget,
            "categories": categories,
            "savings_rate": savings_rate,
            "emergency_fund": emergency_fund,
        }
    )
