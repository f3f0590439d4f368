"""Quiz module catalogue."""

from typing import Dict, List, Tuple

from pydantic import BaseModel

from talent_engine.errors import UnknownModuleError
from talent_engine.models.agent import QuizModuleId


class QuizModuleConfig(BaseModel):
    id: QuizModuleId
    label: str
    description: str
    question_count: int
    dimensions: Tuple[str, ...]             # Dimensions its questions are tagged with
    covers: Tuple[str, ...]                 # Gap dimensions its answers inform


QUIZ_MODULES: Tuple[QuizModuleConfig, ...] = (
    QuizModuleConfig(
        id=QuizModuleId.INTERESTS,
        label="Interests",
        description="Explore what naturally draws your attention and energy using RIASEC dimensions.",
        question_count=5,
        dimensions=("Realistic", "Investigative", "Artistic", "Social", "Enterprising", "Conventional"),
        covers=("Realistic", "Investigative", "Artistic", "Social", "Enterprising", "Conventional"),
    ),
    QuizModuleConfig(
        id=QuizModuleId.WORK_VALUES,
        label="Work Values",
        description="Understand what matters most to you in a work environment.",
        question_count=4,
        dimensions=("Autonomy", "Stability", "Helping_Others", "Achievement", "Variety", "Recognition"),
        covers=("work_values", "adaptability", "emotional_intelligence"),
    ),
    QuizModuleConfig(
        id=QuizModuleId.STRENGTHS_SKILLS,
        label="Strengths & Skills",
        description="Identify your natural abilities across creative, analytical, and interpersonal domains.",
        question_count=4,
        dimensions=("creative_thinking", "analytical_thinking", "communication"),
        covers=(
            "analytical_thinking",
            "creative_thinking",
            "communication",
            "technical_aptitude",
            "problem_solving",
        ),
    ),
    QuizModuleConfig(
        id=QuizModuleId.LEARNING_ENVIRONMENT,
        label="Learning & Environment",
        description="Discover how you learn best and what work environment suits you.",
        question_count=3,
        dimensions=("Learning_Style", "Environment_Preference", "Risk_Tolerance"),
        covers=("adaptability", "teamwork", "leadership"),
    ),
    QuizModuleConfig(
        id=QuizModuleId.CONSTRAINTS,
        label="Life Constraints",
        description="Help us understand your practical considerations for career recommendations.",
        question_count=4,
        dimensions=("Location", "Salary", "Time", "Education"),
        covers=("work_values",),
    ),
)

ALL_QUIZ_MODULES: Tuple[QuizModuleId, ...] = tuple(m.id for m in QUIZ_MODULES)

MODULE_DIMENSION_COVERAGE: Dict[QuizModuleId, Tuple[str, ...]] = {
    m.id: m.covers for m in QUIZ_MODULES
}

TOTAL_MODULE_QUESTIONS = sum(m.question_count for m in QUIZ_MODULES)


def get_module_config(module_id: str) -> QuizModuleConfig:
    for module in QUIZ_MODULES:
        if module.id == module_id:
            return module
    raise UnknownModuleError(f"Unknown quiz module: {module_id}")


def available_modules(completed: List[QuizModuleId], in_progress: List[QuizModuleId]) -> List[QuizModuleId]:
    """Modules neither completed nor in progress, in catalogue order."""
    taken = set(completed) | set(in_progress)
    return [m for m in ALL_QUIZ_MODULES if m not in taken]
