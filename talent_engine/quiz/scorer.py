"""
Quiz Answer Scorer: turns raw quiz answers into dimension-score atoms and
aggregates them into a per-dimension summary and confidence map.

Behavioral Contract:
  - multiple_choice: rubric value for the chosen option, 50 when missing.
  - slider: linear rescale of the raw value into [0, 100].
  - freetext: one batched call to the text scorer for the whole submission.
    Items the service fails to score get a neutral 50 at confidence 0.4.
  - BudgetExceededError is never turned into the neutral fallback.
  - Answers for unknown question ids are skipped; only the first answer
    to a question counts.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Set

import httpx

from talent_engine.config import settings
from talent_engine.errors import TextServiceError
from talent_engine.llm.text_scorer import FreetextItem, ServiceResult, TextScorer
from talent_engine.models.quiz import (
    DimensionScore,
    QuestionType,
    QuizAnswer,
    QuizQuestion,
    QuizScore,
    QuizScoringRequest,
    QuizScoringResponse,
)
from talent_engine.psychometrics.dimensions import ALL_DIMENSIONS, canonical_dimension
from talent_engine.psychometrics.stats import (
    clamp,
    clamp_score,
    mean,
    normalize_unit_confidence,
    round_half_up,
    weighted_mean,
    winsorize_bounds,
)

logger = logging.getLogger(__name__)

SOURCE_WEIGHTS: Dict[QuestionType, float] = {
    QuestionType.MULTIPLE_CHOICE: 1.0,
    QuestionType.SLIDER: 0.9,
    QuestionType.FREETEXT: 0.8,
}

NEUTRAL_SCORE = 50
RUBRIC_CONFIDENCE = 0.9
RUBRIC_MISS_CONFIDENCE = 0.5
SLIDER_CONFIDENCE = 0.8
FREETEXT_DEFAULT_CONFIDENCE = 0.7
FALLBACK_CONFIDENCE = 0.4
FALLBACK_RATIONALE = "AI scoring unavailable"

COVERAGE_WEIGHT = 0.45
DIVERSITY_WEIGHT = 0.25
ATOM_CONFIDENCE_WEIGHT = 0.30
COVERAGE_FULL_AT = 3
SOURCE_KIND_COUNT = 3
CONFIDENCE_FLOOR = 20


def question_dimension(question: QuizQuestion) -> str:
    """The dimension an answer is credited to; untagged questions use their type."""
    if question.dimension:
        return question.dimension
    return question.type.value


def score_multiple_choice(question: QuizQuestion, answer: QuizAnswer) -> DimensionScore:
    rubric = question.scoring_rubric or {}
    key = str(answer.answer)
    if key in rubric:
        score, confidence, rationale = rubric[key], RUBRIC_CONFIDENCE, "Scored via rubric"
    else:
        score, confidence, rationale = NEUTRAL_SCORE, RUBRIC_MISS_CONFIDENCE, "Option not in rubric"
    return DimensionScore(
        dimension=question_dimension(question),
        score=clamp_score(score),
        rationale=rationale,
        confidence=confidence,
        source_kind=QuestionType.MULTIPLE_CHOICE,
        weight=SOURCE_WEIGHTS[QuestionType.MULTIPLE_CHOICE],
    )


def score_slider(question: QuizQuestion, answer: QuizAnswer) -> Optional[DimensionScore]:
    try:
        raw = float(answer.answer)
    except (TypeError, ValueError):
        logger.warning("Skipping non-numeric slider answer for %s: %r", question.id, answer.answer)
        return None

    low = question.slider_min if question.slider_min is not None else 0.0
    high = question.slider_max if question.slider_max is not None else 100.0
    if high == low:
        score = NEUTRAL_SCORE
    else:
        score = clamp_score((raw - low) / (high - low) * 100)

    return DimensionScore(
        dimension=question_dimension(question),
        score=score,
        rationale="Normalized slider value",
        confidence=SLIDER_CONFIDENCE,
        source_kind=QuestionType.SLIDER,
        weight=SOURCE_WEIGHTS[QuestionType.SLIDER],
    )


def fallback_score(item: FreetextItem) -> DimensionScore:
    return DimensionScore(
        dimension=item.dimension,
        score=NEUTRAL_SCORE,
        rationale=FALLBACK_RATIONALE,
        confidence=FALLBACK_CONFIDENCE,
        source_kind=QuestionType.FREETEXT,
        weight=SOURCE_WEIGHTS[QuestionType.FREETEXT],
    )


def aggregate_dimension(atoms: Sequence[DimensionScore]) -> int:
    """Winsorized, source-weighted mean of one dimension's atoms."""
    low, high = winsorize_bounds(a.score for a in atoms)
    return clamp_score(weighted_mean((clamp(a.score, low, high), a.weight) for a in atoms))


def calibrated_confidence(atoms: Sequence[DimensionScore]) -> int:
    if not atoms:
        return 0
    coverage = min(1.0, len(atoms) / COVERAGE_FULL_AT)
    kinds = {a.source_kind for a in atoms if a.source_kind is not None}
    diversity = len(kinds) / SOURCE_KIND_COUNT
    atom_confidence = mean([a.confidence for a in atoms])
    value = round_half_up(100 * (
        COVERAGE_WEIGHT * coverage
        + DIVERSITY_WEIGHT * diversity
        + ATOM_CONFIDENCE_WEIGHT * atom_confidence
    ))
    return min(100, max(CONFIDENCE_FLOOR, value))


def summarize(scores: Sequence[QuizScore]):
    """Per-dimension summary and calibrated confidence, keyed in sorted order."""
    by_dim: Dict[str, List[DimensionScore]] = {}
    for score in scores:
        for atom in score.dimension_scores:
            by_dim.setdefault(atom.dimension, []).append(atom)

    summary = {dim: aggregate_dimension(atoms) for dim, atoms in sorted(by_dim.items())}
    confidence = {dim: calibrated_confidence(atoms) for dim, atoms in sorted(by_dim.items())}
    return summary, confidence


class QuizScorer:
    """
    Scores one quiz submission.

    The text scorer is optional; without one every free-text answer takes
    the neutral fallback.
    """

    def __init__(self, text_scorer: Optional[TextScorer] = None, timeout: Optional[float] = None):
        self.text_scorer = text_scorer
        self.timeout = timeout if timeout is not None else settings.gemini_timeout_seconds

    async def score(self, request: QuizScoringRequest, uid: Optional[str] = None) -> QuizScoringResponse:
        questions = {q.id: q for q in request.questions}
        structured: Dict[str, QuizScore] = {}
        freetext: List[FreetextItem] = []
        answered: List[str] = []

        for answer in request.answers:
            question = questions.get(answer.question_id)
            if question is None:
                logger.warning("Skipping answer for unknown question %s", answer.question_id)
                continue
            if question.id in answered:
                logger.warning("Skipping repeated answer for question %s", question.id)
                continue

            if question.type == QuestionType.FREETEXT:
                freetext.append(FreetextItem(
                    question_id=question.id,
                    question=question.question,
                    answer=str(answer.answer),
                    dimension=question_dimension(question),
                ))
                answered.append(question.id)
                continue

            if question.type == QuestionType.MULTIPLE_CHOICE:
                atom = score_multiple_choice(question, answer)
            else:
                atom = score_slider(question, answer)
            if atom is None:
                continue
            structured[question.id] = QuizScore(question_id=question.id, dimension_scores=[atom])
            answered.append(question.id)

        logger.info(
            "Scoring %d answers (%d structured, %d free-text)",
            len(request.answers), len(structured), len(freetext),
        )
        scored_freetext = await self._score_freetext(freetext, uid)

        scores = []
        for question_id in answered:
            if question_id in structured:
                scores.append(structured[question_id])
            elif question_id in scored_freetext:
                scores.append(scored_freetext.pop(question_id))

        summary, confidence = summarize(scores)
        return QuizScoringResponse(
            scores=scores,
            dimension_summary=summary,
            dimension_confidence=confidence,
        )

    async def _score_freetext(
        self, items: Sequence[FreetextItem], uid: Optional[str]
    ) -> Dict[str, QuizScore]:
        if not items:
            return {}

        allowed = self._allowed_dimensions(items)
        results: List[ServiceResult] = []
        if self.text_scorer is None:
            logger.warning("No text scorer configured; %d free-text answers use the neutral score", len(items))
        else:
            try:
                results = await asyncio.wait_for(
                    self.text_scorer.score_freetext(items, sorted(allowed), uid=uid),
                    timeout=self.timeout,
                )
            except (TextServiceError, asyncio.TimeoutError, httpx.HTTPError) as err:
                logger.warning("Free-text scoring failed, using neutral score: %s", err)
                results = []

        by_question: Dict[str, ServiceResult] = {}
        for result in results:
            by_question.setdefault(result.question_id, result)

        scored: Dict[str, QuizScore] = {}
        for item in items:
            atoms = self._atoms_from_result(by_question.get(item.question_id), allowed)
            if not atoms:
                atoms = [fallback_score(item)]
            scored[item.question_id] = QuizScore(question_id=item.question_id, dimension_scores=atoms)
        return scored

    @staticmethod
    def _allowed_dimensions(items: Sequence[FreetextItem]) -> Set[str]:
        return set(ALL_DIMENSIONS) | {item.dimension for item in items}

    @staticmethod
    def _atoms_from_result(result: Optional[ServiceResult], allowed: Set[str]) -> List[DimensionScore]:
        if result is None:
            return []

        atoms = []
        for entry in result.dimension_scores:
            dimension = entry.dimension if entry.dimension in allowed else canonical_dimension(entry.dimension)
            if dimension not in allowed:
                logger.warning("Dropping non-whitelisted dimension %r for %s", entry.dimension, result.question_id)
                continue
            confidence = entry.confidence
            if confidence is None:
                confidence = FREETEXT_DEFAULT_CONFIDENCE
            atoms.append(DimensionScore(
                dimension=dimension,
                score=clamp_score(entry.score),
                rationale=entry.rationale,
                confidence=normalize_unit_confidence(confidence),
                source_kind=QuestionType.FREETEXT,
                weight=SOURCE_WEIGHTS[QuestionType.FREETEXT],
            ))
        return atoms
