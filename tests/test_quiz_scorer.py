"""Tests for the Quiz Answer Scorer."""

import asyncio
from typing import List, Optional, Sequence

import pytest

from talent_engine.errors import BudgetExceededError, TextServiceError
from talent_engine.llm.text_scorer import FreetextItem, ServiceDimensionScore, ServiceResult
from talent_engine.models.quiz import (
    DimensionScore,
    QuestionType,
    QuizAnswer,
    QuizQuestion,
    QuizScore,
    QuizScoringRequest,
)
from talent_engine.quiz.scorer import (
    FALLBACK_CONFIDENCE,
    QuizScorer,
    aggregate_dimension,
    calibrated_confidence,
    summarize,
)


class FakeTextScorer:
    """Returns canned results and records every call."""

    def __init__(self, results: Optional[List[ServiceResult]] = None):
        self.results = results or []
        self.calls: List[List[FreetextItem]] = []
        self.allowed: List[Sequence[str]] = []

    async def score_freetext(self, items, allowed_dimensions, uid=None):
        self.calls.append(list(items))
        self.allowed.append(allowed_dimensions)
        return self.results


class FailingTextScorer:
    async def score_freetext(self, items, allowed_dimensions, uid=None):
        raise TextServiceError("service down")


class SlowTextScorer:
    async def score_freetext(self, items, allowed_dimensions, uid=None):
        await asyncio.sleep(5)
        return []


class OverBudgetTextScorer:
    async def score_freetext(self, items, allowed_dimensions, uid=None):
        raise BudgetExceededError(uid or "anon", 30.0, 25.0)


def _mc(qid: str, dimension: str = "Realistic", rubric=None) -> QuizQuestion:
    return QuizQuestion(
        id=qid,
        type=QuestionType.MULTIPLE_CHOICE,
        question=f"Question {qid}",
        dimension=dimension,
        scoring_rubric=rubric if rubric is not None else {"a": 80, "b": 20},
        options=["a", "b"],
    )


def _slider(qid: str, dimension: str = "Realistic", low=1, high=5) -> QuizQuestion:
    return QuizQuestion(
        id=qid, type=QuestionType.SLIDER, question=f"Slider {qid}",
        dimension=dimension, slider_min=low, slider_max=high,
    )


def _freetext(qid: str, dimension: str = "creative_thinking") -> QuizQuestion:
    return QuizQuestion(
        id=qid, type=QuestionType.FREETEXT, question=f"Tell us about {qid}", dimension=dimension,
    )


def _request(questions, answers) -> QuizScoringRequest:
    return QuizScoringRequest(
        questions=questions,
        answers=[QuizAnswer(question_id=qid, answer=a) for qid, a in answers],
    )


def _score(request, scorer=None, uid=None):
    return asyncio.run((scorer or QuizScorer()).score(request, uid=uid))


class TestStructuredAnswers:
    def test_multiple_choice_rubric(self):
        response = _score(_request([_mc("q1")], [("q1", "a")]))
        atom = response.scores[0].dimension_scores[0]
        assert atom.score == 80
        assert atom.source_kind == QuestionType.MULTIPLE_CHOICE
        assert atom.weight == 1.0

    def test_multiple_choice_missing_option(self):
        response = _score(_request([_mc("q1")], [("q1", "z")]))
        assert response.scores[0].dimension_scores[0].score == 50

    def test_multiple_choice_without_rubric(self):
        response = _score(_request([_mc("q1", rubric={})], [("q1", "a")]))
        assert response.scores[0].dimension_scores[0].score == 50

    def test_slider_rescale(self):
        response = _score(_request([_slider("s1")], [("s1", 4)]))
        atom = response.scores[0].dimension_scores[0]
        assert atom.score == 75
        assert atom.weight == 0.9

    def test_slider_out_of_range_is_clamped(self):
        response = _score(_request([_slider("s1")], [("s1", 9)]))
        assert response.scores[0].dimension_scores[0].score == 100

    def test_slider_defaults_to_0_100(self):
        question = QuizQuestion(id="s1", type=QuestionType.SLIDER, question="?", dimension="Social")
        response = _score(_request([question], [("s1", 37)]))
        assert response.scores[0].dimension_scores[0].score == 37

    def test_non_numeric_slider_is_skipped(self):
        response = _score(_request([_slider("s1")], [("s1", "lots")]))
        assert response.scores == []

    def test_untagged_question_uses_type_as_dimension(self):
        question = QuizQuestion(
            id="q1", type=QuestionType.MULTIPLE_CHOICE, question="?", scoring_rubric={"a": 70},
        )
        response = _score(_request([question], [("q1", "a")]))
        assert response.dimension_summary == {"multiple_choice": 70}

    def test_unknown_question_id_is_skipped(self):
        response = _score(_request([_mc("q1")], [("ghost", "a"), ("q1", "b")]))
        assert [s.question_id for s in response.scores] == ["q1"]

    def test_repeated_answer_keeps_first(self):
        response = _score(_request([_mc("q1")], [("q1", "a"), ("q1", "b")]))
        assert len(response.scores) == 1
        assert response.scores[0].dimension_scores[0].score == 80
        assert response.dimension_summary == {"Realistic": 80}

    def test_repeated_freetext_sent_once(self):
        fake = FakeTextScorer()
        _score(_request([_freetext("f1")], [("f1", "first"), ("f1", "second")]), QuizScorer(fake))
        assert [i.answer for i in fake.calls[0]] == ["first"]


class TestFreetext:
    def test_single_batched_call(self):
        fake = FakeTextScorer([
            ServiceResult(question_id="f1", dimension_scores=[
                ServiceDimensionScore(dimension="creative_thinking", score=85, rationale="Vivid", confidence=0.9),
            ]),
            ServiceResult(question_id="f2", dimension_scores=[
                ServiceDimensionScore(dimension="communication", score=70, rationale="Clear"),
            ]),
        ])
        request = _request(
            [_freetext("f1"), _freetext("f2", "communication"), _mc("q1")],
            [("f1", "I paint"), ("q1", "a"), ("f2", "I explain things")],
        )
        response = _score(request, QuizScorer(fake))

        assert len(fake.calls) == 1
        assert [i.question_id for i in fake.calls[0]] == ["f1", "f2"]
        assert [s.question_id for s in response.scores] == ["f1", "q1", "f2"]

        f1 = response.scores[0].dimension_scores[0]
        assert (f1.score, f1.confidence, f1.weight) == (85, 0.9, 0.8)
        f2 = response.scores[2].dimension_scores[0]
        assert f2.confidence == 0.7

    def test_whitelist_contains_question_dimensions(self):
        fake = FakeTextScorer()
        _score(_request([_freetext("f1", "Curiosity")], [("f1", "x")]), QuizScorer(fake))
        assert "Curiosity" in fake.allowed[0]
        assert "Realistic" in fake.allowed[0]

    def test_non_whitelisted_dimension_dropped(self):
        fake = FakeTextScorer([
            ServiceResult(question_id="f1", dimension_scores=[
                ServiceDimensionScore(dimension="charisma", score=99),
                ServiceDimensionScore(dimension="Creative Thinking", score=60, confidence=0.8),
            ]),
        ])
        response = _score(_request([_freetext("f1")], [("f1", "x")]), QuizScorer(fake))
        atoms = response.scores[0].dimension_scores
        assert [(a.dimension, a.score) for a in atoms] == [("creative_thinking", 60)]

    def test_fallback_on_service_failure(self):
        request = _request([_freetext("f1", "Artistic"), _mc("q1")], [("f1", "x"), ("q1", "a")])
        response = _score(request, QuizScorer(FailingTextScorer()))

        fallback = response.scores[0]
        assert fallback.question_id == "f1"
        atom = fallback.dimension_scores[0]
        assert atom.dimension == "Artistic"
        assert atom.score == 50
        assert atom.confidence == FALLBACK_CONFIDENCE == 0.4
        assert atom.rationale == "AI scoring unavailable"
        assert response.scores[1].dimension_scores[0].score == 80

    def test_fallback_on_timeout(self):
        response = _score(
            _request([_freetext("f1")], [("f1", "x")]),
            QuizScorer(SlowTextScorer(), timeout=0.01),
        )
        assert response.scores[0].dimension_scores[0].score == 50
        assert response.scores[0].dimension_scores[0].confidence == 0.4

    def test_fallback_for_items_missing_from_results(self):
        fake = FakeTextScorer([
            ServiceResult(question_id="f1", dimension_scores=[
                ServiceDimensionScore(dimension="creative_thinking", score=90, confidence=1),
            ]),
        ])
        response = _score(
            _request([_freetext("f1"), _freetext("f2", "Social")], [("f1", "x"), ("f2", "y")]),
            QuizScorer(fake),
        )
        assert response.scores[1].dimension_scores[0].dimension == "Social"
        assert response.scores[1].dimension_scores[0].score == 50

    def test_no_text_scorer_uses_fallback(self):
        response = _score(_request([_freetext("f1")], [("f1", "x")]))
        assert response.scores[0].dimension_scores[0].score == 50

    def test_budget_exceeded_propagates(self):
        with pytest.raises(BudgetExceededError):
            _score(_request([_freetext("f1")], [("f1", "x")]), QuizScorer(OverBudgetTextScorer()), uid="u1")


class TestAggregation:
    def test_winsorized_summary(self):
        questions = [_mc(f"q{i}", rubric={"x": v}) for i, v in enumerate([10, 50, 52, 55, 95])]
        answers = [(f"q{i}", "x") for i in range(5)]
        response = _score(_request(questions, answers))
        assert response.dimension_summary == {"Realistic": 52}

    def test_weighted_by_source(self):
        atoms = [
            DimensionScore(dimension="d", score=100, weight=1.0),
            DimensionScore(dimension="d", score=0, weight=0.8),
        ]
        # 100 / 1.8
        assert aggregate_dimension(atoms) == 56

    def test_calibrated_confidence(self):
        response = _score(_request(
            [_mc(f"q{i}", rubric={"x": 60}) for i in range(5)],
            [(f"q{i}", "x") for i in range(5)],
        ))
        # 100 * (0.45 * 1 + 0.25 * 1/3 + 0.30 * 0.9)
        assert response.dimension_confidence == {"Realistic": 80}

    def test_calibrated_confidence_mixed_kinds(self):
        atoms = [
            DimensionScore(dimension="d", score=50, confidence=1.0, source_kind=kind)
            for kind in QuestionType
        ]
        assert calibrated_confidence(atoms) == 100

    def test_confidence_floor(self):
        atoms = [DimensionScore(dimension="d", score=50, confidence=0.0)]
        assert calibrated_confidence(atoms) == 20

    def test_summary_order_independent(self):
        scores = [
            QuizScore(question_id=f"q{i}", dimension_scores=[
                DimensionScore(dimension="d", score=s, weight=w, source_kind=QuestionType.SLIDER)
            ])
            for i, (s, w) in enumerate([(12, 0.9), (88, 1.0), (47, 0.8), (63, 0.9), (5, 1.0)])
        ]
        expected = summarize(scores)
        assert summarize(list(reversed(scores))) == expected
        assert summarize(scores[2:] + scores[:2]) == expected

    def test_empty_submission(self):
        response = _score(_request([], []))
        assert response.scores == []
        assert response.dimension_summary == {}
        assert response.dimension_confidence == {}
