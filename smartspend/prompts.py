from __future__ import annotations

from typing import Mapping

from .models import TransactionAnalysis

SYSTEM_INSTRUCTION = (
    "You are a professional financial advisor AI specializing in budget optimization. "
    "Analyze transaction data and provide intelligent budget recommendations. "
    "Return your response as valid JSON with the specified structure."
)

RESPONSE_SHAPE = """{
  "totalBudget": number,
  "categories": [
    {
      "category": "string",
      "suggestedAmount": number,
      "confidence": number (0-100),
      "reasoning": "string explaining the recommendation",
      "trend": "increasing|decreasing|stable",
      "seasonalFactor": number (0.5-2.0)
    }
  ],
  "savingsRate": number (percentage),
  "emergencyFund": number,
  "insights": [
    "string insights about spending patterns and recommendations"
  ]
}"""

GUIDELINES = (
    "Recommend the 50/30/20 rule as baseline (50% needs, 30% wants, 20% savings)",
    "Adjust budgets for spending trends: tighten increasing categories, keep gains in decreasing ones",
    "Provide confidence scores (0-100) based on how much history each category has",
    "Include 3-5 actionable insights",
    "Keep the total budget at or below 80% of income and recommend an emergency fund "
    "of at least 3 months of expenses (3-6 months preferred)",
)


def _money(currency: str, amount: float) -> str:
    return f"{currency} {amount:,.2f}"


def _lines(items: Mapping[str, str]) -> str:
    if not items:
        return "- none"
    return "\n".join(f"- {key}: {value}" for key, value in items.items())


def compose_budget_prompt(analysis: TransactionAnalysis, monthly_income: float, currency: str) -> str:
    """Render the statistics bundle into the user prompt for the completion call."""
    recent = _lines({cat: _money(currency, amt) for cat, amt in analysis.recent.category_totals.items()})
    trends = _lines(
        {
            cat: f"{trend.direction} ({trend.percent_change:.1f}% change)"
            for cat, trend in analysis.trends.items()
        }
    )
    averages = _lines({cat: _money(currency, avg) for cat, avg in analysis.monthly_averages.items()})
    seasonal = _lines({cat: f"{factor:.2f}" for cat, factor in analysis.seasonal_factors.items()})
    guidelines = "\n".join(f"{i}. {text}" for i, text in enumerate(GUIDELINES, start=1))

    return f"""
Analyze this financial data and provide intelligent budget recommendations in JSON format:

INCOME: {_money(currency, monthly_income)}

RECENT SPENDING ANALYSIS (Last 3 months):
{recent}

SPENDING TRENDS:
{trends}

MONTHLY AVERAGES:
{averages}

SEASONAL FACTORS (current month vs. typical):
{seasonal}

CURRENT TOTAL SPENDING: {_money(currency, analysis.total_recent_spending)}
TRANSACTION COUNT: {analysis.recent.transaction_count}
AVERAGE TRANSACTION: {_money(currency, analysis.recent.average_transaction_amount)}

Return ONLY a JSON object with this exact structure:
{RESPONSE_SHAPE}

Guidelines:
{guidelines}

Focus on practical, achievable recommendations based on the user's actual spending behavior.
""".strip()
