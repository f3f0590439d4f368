"""Tests for the quiz module catalogue."""

import pytest

from talent_engine.errors import UnknownModuleError
from talent_engine.models.agent import QuizModuleId
from talent_engine.quiz.modules import (
    ALL_QUIZ_MODULES,
    MODULE_DIMENSION_COVERAGE,
    TOTAL_MODULE_QUESTIONS,
    available_modules,
    get_module_config,
)


class TestCatalogue:
    def test_module_order(self):
        assert [m.value for m in ALL_QUIZ_MODULES] == [
            "interests",
            "work_values",
            "strengths_skills",
            "learning_environment",
            "constraints",
        ]

    def test_interests_cover_riasec(self):
        assert len(MODULE_DIMENSION_COVERAGE[QuizModuleId.INTERESTS]) == 6

    def test_question_total(self):
        assert TOTAL_MODULE_QUESTIONS == 20

    def test_lookup(self):
        assert get_module_config("strengths_skills").label == "Strengths & Skills"

    def test_unknown_module(self):
        with pytest.raises(UnknownModuleError):
            get_module_config("astrology")


class TestAvailableModules:
    def test_excludes_completed_and_in_progress(self):
        remaining = available_modules(
            [QuizModuleId.INTERESTS], [QuizModuleId.CONSTRAINTS]
        )
        assert remaining == [
            QuizModuleId.WORK_VALUES,
            QuizModuleId.STRENGTHS_SKILLS,
            QuizModuleId.LEARNING_ENVIRONMENT,
        ]

    def test_none_left(self):
        assert available_modules(list(QuizModuleId), []) == []
