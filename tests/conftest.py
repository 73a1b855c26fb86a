"""Pytest configuration and fixtures."""
import json
from datetime import date

import pytest

from smartspend.models import Transaction

TODAY = date(2024, 6, 30)


class FakeCompletion:
    """Completion service double that returns canned text or raises."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def complete(self, system_instruction, prompt, *, temperature, max_tokens):
        self.calls.append(
            {
                "system_instruction": system_instruction,
                "prompt": prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_tx():
    counter = {"n": 0}

    def _make(amount, category="Food", on=TODAY, kind="expense"):
        counter["n"] += 1
        return Transaction(id=f"t{counter['n']}", amount=amount, category=category, date=on, kind=kind)

    return _make


@pytest.fixture
def quarter_of_food(make_tx):
    """Three monthly Food expenses totalling 90000 inside the recent window."""
    return [
        make_tx(30000, on=date(2024, 4, 15)),
        make_tx(30000, on=date(2024, 5, 15)),
        make_tx(30000, on=date(2024, 6, 15)),
        make_tx(300000, category="Salary", on=date(2024, 6, 1), kind="income"),
    ]


@pytest.fixture
def recommendation_payload():
    return {
        "totalBudget": 50000,
        "categories": [
            {
                "category": "Food",
                "suggestedAmount": 30000,
                "confidence": 85,
                "reasoning": "Stable grocery spending",
                "trend": "stable",
                "seasonalFactor": 1.0,
            },
            {
                "category": "Transport",
                "suggestedAmount": 20000,
                "confidence": 60,
                "reasoning": "Commuting costs rising",
                "trend": "increasing",
                "seasonalFactor": 1.2,
            },
        ],
        "savingsRate": 20,
        "emergencyFund": 150000,
        "insights": ["Food is your largest category", "Transport is trending up", "Keep saving 20%"],
    }


@pytest.fixture
def fake_completion(recommendation_payload):
    return FakeCompletion(response=json.dumps(recommendation_payload))
