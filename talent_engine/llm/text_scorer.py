"""
Free-text answer scoring through the external text-understanding service.

All free-text answers of one submission go out in a single batched prompt
together with the whitelist of dimension names the service may use.
"""

import json
import logging
from typing import List, Optional, Protocol, Sequence

from pydantic import BaseModel, ValidationError

from talent_engine.errors import TextServiceError
from talent_engine.llm.budget import BudgetPolicy
from talent_engine.llm.gemini_client import GeminiClient
from talent_engine.models.base import WireModel

logger = logging.getLogger(__name__)

QUIZ_SCORING_PROMPT = """You are a career psychologist scoring open-ended quiz answers.
For each answer, judge how strongly it expresses each relevant dimension on a
0-100 scale, give a one-sentence rationale, and a confidence between 0 and 1
for your judgement. Only use dimension names from the allowed list."""


class FreetextItem(BaseModel):
    question_id: str
    question: str
    answer: str
    dimension: str


class ServiceDimensionScore(BaseModel):
    dimension: str
    score: float
    rationale: str = ""
    confidence: Optional[float] = None


class ServiceResult(WireModel):
    question_id: str
    dimension_scores: List[ServiceDimensionScore] = []


class ServiceResponse(BaseModel):
    results: List[ServiceResult] = []


class TextScorer(Protocol):
    """Pluggable backend for free-text scoring."""

    async def score_freetext(
        self,
        items: Sequence[FreetextItem],
        allowed_dimensions: Sequence[str],
        uid: Optional[str] = None,
    ) -> List[ServiceResult]: ...


def build_scoring_prompt(items: Sequence[FreetextItem], allowed_dimensions: Sequence[str]) -> str:
    context = "\n\n".join(
        f"Question ({item.question_id}, dimension: {item.dimension}): {item.question}\n"
        f"Answer: {item.answer}"
        for item in items
    )
    return (
        f"{QUIZ_SCORING_PROMPT}\n\n"
        f"Allowed dimensions: {', '.join(allowed_dimensions)}\n\n"
        f"Score each of the following answers:\n\n{context}\n\n"
        'Return JSON: { "results": [{ "questionId": "string", "dimensionScores": '
        '[{ "dimension": "string", "score": 0-100, "rationale": "string", '
        '"confidence": 0-1 }] }] }'
    )


def parse_service_response(text: str) -> List[ServiceResult]:
    """Parse the strict JSON contract; anything else is a TextServiceError."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.startswith("json"):
            cleaned = cleaned[4:]
    try:
        return ServiceResponse.model_validate(json.loads(cleaned)).results
    except (json.JSONDecodeError, ValidationError) as err:
        raise TextServiceError(f"Malformed scoring response: {err}") from err


class GeminiTextScorer:
    """TextScorer backed by GeminiClient, with optional BYOK budgeting."""

    def __init__(self, client: GeminiClient, budget: Optional[BudgetPolicy] = None):
        self.client = client
        self.budget = budget

    async def score_freetext(
        self,
        items: Sequence[FreetextItem],
        allowed_dimensions: Sequence[str],
        uid: Optional[str] = None,
    ) -> List[ServiceResult]:
        prompt = build_scoring_prompt(items, allowed_dimensions)

        api_key = None
        key_source = "platform"
        if self.budget is not None:
            # BudgetExceededError propagates to the caller
            resolution = self.budget.resolve_key(uid)
            api_key, key_source = resolution.api_key, resolution.key_source

        text = await self.client.generate(prompt, api_key=api_key, json_mode=True)

        if self.budget is not None and uid:
            self.budget.ledger.track(
                uid=uid,
                model=self.client.model,
                feature="quiz_score",
                key_source=key_source,
                input_chars=len(prompt),
                output_chars=len(text),
            )
        return parse_service_response(text)
