"""Budget recommendation pipeline.

Aggregating -> Composing -> AwaitingCompletion -> Validating -> Done, with
any completion or parsing failure diverted to the local fallback. One
completion attempt is made per call; retries belong to the caller.
"""

from __future__ import annotations

import math
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from .aggregation import analyze_transaction_patterns
from .completion import CompletionService, create_completion_service
from .config import AppConfig
from .errors import BudgetAIError, CompletionUnavailable, InvalidInput
from .fallback import fallback_recommendation
from .logging import get_logger
from .models import BudgetRecommendation, Transaction
from .prompts import SYSTEM_INSTRUCTION, compose_budget_prompt
from .throttling import GateChain, RateLimiter, RequestGate, RequestMonitor
from .validation import Err, parse_recommendation, validate_recommendation

logger = get_logger("smartspend.advisor")

TransactionInput = Union[Transaction, Mapping[str, Any]]


class Stage(str, Enum):
    AGGREGATING = "aggregating"
    COMPOSING = "composing"
    AWAITING_COMPLETION = "awaiting_completion"
    VALIDATING = "validating"
    FALLBACK = "fallback"
    DONE = "done"


def coerce_transactions(transactions: Iterable[TransactionInput]) -> List[Transaction]:
    """Validate caller-supplied transactions, rejecting rather than repairing bad rows."""
    if transactions is None:
        raise InvalidInput("transactions must be a list, got None")
    coerced: List[Transaction] = []
    for index, item in enumerate(transactions):
        if isinstance(item, Transaction):
            coerced.append(item)
            continue
        if not isinstance(item, Mapping):
            raise InvalidInput(f"Transaction #{index} is a {type(item).__name__}, expected a mapping")
        try:
            coerced.append(Transaction.model_validate(dict(item)))
        except ValidationError as exc:
            raise InvalidInput(f"Transaction #{index} is malformed: {exc.errors()[0]['msg']}") from exc
    return coerced


def check_income(monthly_income: Any) -> float:
    if isinstance(monthly_income, bool) or not isinstance(monthly_income, (int, float, Decimal)):
        raise InvalidInput(f"monthly_income must be a number, got {type(monthly_income).__name__}")
    income = float(monthly_income)
    if not math.isfinite(income) or income < 0:
        raise InvalidInput(f"monthly_income must be a non-negative finite number, got {monthly_income!r}")
    return income


class BudgetAdvisor:
    """Turns a transaction history into a budget recommendation.

    ``completion`` and ``gate`` are optional collaborators: without a
    completion service every call uses the fallback, and a gate that refuses
    a request is treated like an unavailable service.
    """

    def __init__(
        self,
        completion: Optional[CompletionService] = None,
        gate: Optional[RequestGate] = None,
        config: Optional[AppConfig] = None,
    ):
        self.completion = completion
        self.gate = gate
        self.config = config or AppConfig()

    def _enter(self, stage: Stage) -> None:
        logger.debug("Budget pipeline stage: %s", stage.value, extra={"stage": stage.value})

    def _request_completion(self, system_instruction: str, prompt: str, user_key: str) -> str:
        if self.completion is None:
            raise CompletionUnavailable("No completion service configured")
        if self.gate is not None:
            if not self.gate.may_proceed(user_key):
                raise CompletionUnavailable(f"Request limit reached for {user_key}")
            self.gate.record(user_key)
        try:
            return self.completion.complete(
                system_instruction,
                prompt,
                temperature=self.config.temperature,
                max_tokens=self.config.max_output_tokens,
            )
        except CompletionUnavailable:
            raise
        except Exception as e:
            raise CompletionUnavailable(f"Completion service failed: {e}") from e

    def recommend(
        self,
        transactions: Iterable[TransactionInput],
        monthly_income: float,
        currency: Optional[str] = None,
        *,
        user_key: str = "anonymous",
        today: Optional[date] = None,
    ) -> BudgetRecommendation:
        """Return AI-derived advice, or the local fallback when the model cannot deliver.

        Only InvalidInput escapes; every other failure ends in the fallback.
        """
        txs = coerce_transactions(transactions)
        income = check_income(monthly_income)
        currency = currency or self.config.currency
        today = today or date.today()

        try:
            self._enter(Stage.AGGREGATING)
            analysis = analyze_transaction_patterns(txs, today)

            self._enter(Stage.COMPOSING)
            prompt = compose_budget_prompt(analysis, income, currency)

            self._enter(Stage.AWAITING_COMPLETION)
            raw = self._request_completion(SYSTEM_INSTRUCTION, prompt, user_key)

            self._enter(Stage.VALIDATING)
            parsed = parse_recommendation(raw)
            if isinstance(parsed, Err):
                raise parsed.error
            recommendation = validate_recommendation(parsed.value, income)
        except BudgetAIError as exc:
            self._enter(Stage.FALLBACK)
            logger.warning("Using fallback budget recommendation: %s", exc)
            recommendation = fallback_recommendation(txs, income, today, reason=str(exc))
        else:
            logger.info(
                "AI budget recommendation ready",
                extra={"stage": Stage.DONE.value},
            )
            recommendation = recommendation.model_copy(update={"source": "ai", "fallback_reason": None})

        self._enter(Stage.DONE)
        return recommendation


def create_advisor(config: AppConfig) -> BudgetAdvisor:
    """Wire the Gemini service and per-user request limits from configuration."""
    try:
        completion = create_completion_service(config)
    except CompletionUnavailable as exc:
        logger.warning("Completion service unavailable: %s", exc)
        completion = None
    gate = GateChain(
        RateLimiter(config.rate_limit_requests, config.rate_limit_window_seconds),
        RequestMonitor(config.max_requests_per_minute),
    )
    return BudgetAdvisor(completion=completion, gate=gate, config=config)


def compute_budget_recommendation(
    transactions: Iterable[TransactionInput],
    monthly_income: float,
    currency: str = "USD",
    *,
    completion: Optional[CompletionService] = None,
    gate: Optional[RequestGate] = None,
    config: Optional[AppConfig] = None,
    user_key: str = "anonymous",
    today: Optional[date] = None,
) -> BudgetRecommendation:
    advisor = BudgetAdvisor(completion=completion, gate=gate, config=config)
    return advisor.recommend(transactions, monthly_income, currency, user_key=user_key, today=today)
