from __future__ import annotations


class BudgetAIError(Exception):
    """Base class for budget advisor failures."""


class MalformedRecommendation(BudgetAIError):
    """Completion output that does not parse into a BudgetRecommendation."""


class CompletionUnavailable(BudgetAIError):
    """The text-completion service errored, timed out or was throttled."""


class InvalidInput(BudgetAIError, ValueError):
    """Caller supplied a negative income or a malformed transaction."""
