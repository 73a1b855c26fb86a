import json

import pytest

from smartspend.errors import MalformedRecommendation
from smartspend.models import BudgetRecommendation
from smartspend.validation import Err, Ok, parse_recommendation, validate_recommendation


def test_parse_valid_json(recommendation_payload):
    result = parse_recommendation(json.dumps(recommendation_payload))

    assert isinstance(result, Ok)
    assert result.is_ok()
    assert result.value.total_budget == 50000
    assert result.value.categories[1].seasonal_factor == 1.2


def test_parse_strips_wrapping_code_fence(recommendation_payload):
    raw = "```json\n" + json.dumps(recommendation_payload) + "\n```"

    assert isinstance(parse_recommendation(raw), Ok)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not json at all",
        "[1, 2, 3]",
        '{"totalBudget": 100}',
        '{"totalBudget": "lots", "categories": [], "savingsRate": 10, "emergencyFund": 0, "insights": []}',
    ],
)
def test_parse_rejects_non_conforming_output(raw):
    result = parse_recommendation(raw)

    assert isinstance(result, Err)
    assert not result.is_ok()
    assert isinstance(result.error, MalformedRecommendation)


def test_parse_rejects_bad_category_entry(recommendation_payload):
    recommendation_payload["categories"][0]["trend"] = "sideways"

    assert isinstance(parse_recommendation(json.dumps(recommendation_payload)), Err)


def test_parse_rejects_negative_money(recommendation_payload):
    recommendation_payload["totalBudget"] = -5

    assert isinstance(parse_recommendation(json.dumps(recommendation_payload)), Err)


def test_validate_raises_on_malformed_mapping():
    with pytest.raises(MalformedRecommendation):
        validate_recommendation({"totalBudget": 10}, 1000)


def test_over_budget_is_clamped_and_categories_scaled(recommendation_payload):
    recommendation_payload["totalBudget"] = 500000
    recommendation_payload["categories"][0]["suggestedAmount"] = 300000
    recommendation_payload["categories"][1]["suggestedAmount"] = 200000

    result = validate_recommendation(recommendation_payload, 400000)

    assert result.total_budget == pytest.approx(320000)
    assert result.categories[0].suggested_amount == pytest.approx(192000)
    assert result.categories[1].suggested_amount == pytest.approx(128000)
    assert result.emergency_fund >= result.total_budget * 3


def test_low_savings_rate_is_raised(recommendation_payload):
    recommendation_payload["savingsRate"] = 5

    assert validate_recommendation(recommendation_payload, 400000).savings_rate == 10


def test_small_emergency_fund_is_raised(recommendation_payload):
    recommendation_payload["totalBudget"] = 50000
    recommendation_payload["emergencyFund"] = 100

    assert validate_recommendation(recommendation_payload, 400000).emergency_fund == pytest.approx(150000)


def test_confidence_and_seasonal_factor_are_clamped(recommendation_payload):
    recommendation_payload["categories"][0]["confidence"] = 140
    recommendation_payload["categories"][0]["seasonalFactor"] = 0.1
    recommendation_payload["categories"][1]["confidence"] = -3
    recommendation_payload["categories"][1]["seasonalFactor"] = 7

    result = validate_recommendation(recommendation_payload, 400000)

    assert result.categories[0].confidence == 100
    assert result.categories[0].seasonal_factor == 0.5
    assert result.categories[1].confidence == 0
    assert result.categories[1].seasonal_factor == 2.0


def test_validation_is_idempotent(recommendation_payload):
    valid = BudgetRecommendation.model_validate(recommendation_payload)

    once = validate_recommendation(valid, 400000)
    twice = validate_recommendation(once, 400000)

    assert once == valid
    assert twice == once


def test_validation_does_not_mutate_input(recommendation_payload):
    recommendation_payload["totalBudget"] = 900000
    candidate = BudgetRecommendation.model_validate(recommendation_payload)

    validate_recommendation(candidate, 100000)

    assert candidate.total_budget == 900000


@pytest.mark.parametrize("income", [0, 1, 1234.56, 400000, 10**9])
@pytest.mark.parametrize(
    "total, savings, fund",
    [(0, -50, 0), (10**12, 0, 0), (999.99, 9.99, 1), (50, 100, 10**15)],
)
def test_invariants_hold_for_adversarial_candidates(recommendation_payload, income, total, savings, fund):
    recommendation_payload.update(totalBudget=total, savingsRate=savings, emergencyFund=fund)

    result = validate_recommendation(recommendation_payload, income)

    assert result.total_budget <= income * 0.8
    assert result.savings_rate >= 10
    assert result.emergency_fund >= result.total_budget * 3
