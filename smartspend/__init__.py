"""SmartSpend budget advisor core."""

from .advisor import BudgetAdvisor, compute_budget_recommendation, create_advisor
from .errors import BudgetAIError, CompletionUnavailable, InvalidInput, MalformedRecommendation
from .models import BudgetRecommendation, CategoryRecommendation, Transaction

__all__ = [
    "BudgetAdvisor",
    "BudgetAIError",
    "BudgetRecommendation",
    "CategoryRecommendation",
    "CompletionUnavailable",
    "InvalidInput",
    "MalformedRecommendation",
    "Transaction",
    "compute_budget_recommendation",
    "create_advisor",
]
