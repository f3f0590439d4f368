"""
Talent Engine API: FastAPI endpoints.

Exposes the engine via a REST API for:
- Quiz answer scoring
- Agent state evaluation
- Profile building
- Confidence profiles and gaps
- Live-session summaries
- The evidence log
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import Field

from talent_engine.agent.orchestrator import evaluate_state, make_decision
from talent_engine.career.profile_builder import build_from_input
from talent_engine.config import configure_logging, settings
from talent_engine.confidence.calculator import compute_profile_confidence
from talent_engine.confidence.gaps import identify_gaps
from talent_engine.errors import BudgetExceededError
from talent_engine.evidence.store import EvidenceStore
from talent_engine.llm.budget import BudgetPolicy
from talent_engine.llm.gemini_client import GeminiClient
from talent_engine.llm.text_scorer import GeminiTextScorer
from talent_engine.models.agent import AgentState
from talent_engine.models.base import WireModel
from talent_engine.models.evidence import ConfidenceSource, SourceType
from talent_engine.models.profile import (
    ComputedProfile,
    DataInsight,
    ProfileBuilderInput,
    SessionInsight,
    UserSignal,
)
from talent_engine.models.quiz import QuizScore, QuizScoringRequest
from talent_engine.quiz.scorer import QuizScorer
from talent_engine.session.summary import summarize_session_artifacts

logger = logging.getLogger(__name__)


# --- Request Models ---

class ConfidenceProfileRequest(WireModel):
    profile: Optional[ComputedProfile] = None
    data_insights: List[DataInsight] = []
    quiz_scores: List[QuizScore] = []
    session_insights: List[SessionInsight] = []
    target_confidence: Optional[int] = Field(default=None, ge=0, le=100)


class SessionArtifactsRequest(WireModel):
    insights: List[SessionInsight] = []
    signals: List[UserSignal] = []


class EvidenceAppendRequest(WireModel):
    type: SourceType
    dimension: str
    score: float = Field(ge=0, le=100)
    evidence: str = ""
    timestamp: Optional[datetime] = None
    origin: Optional[str] = None


# --- Application Factory ---

def default_gemini_client() -> Optional[GeminiClient]:
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set; free-text answers will use the neutral score")
        return None
    return GeminiClient(settings.gemini_api_key)


def default_quiz_scorer(client: Optional[GeminiClient]) -> QuizScorer:
    """Gemini-backed scorer when a client is available, else fallback-only."""
    if client is None:
        return QuizScorer()
    return QuizScorer(GeminiTextScorer(client, BudgetPolicy(client.api_key)))


def create_app(
    evidence_store: Optional[EvidenceStore] = None,
    quiz_scorer: Optional[QuizScorer] = None,
    target_confidence: Optional[int] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    # Only a client built here is owned, and closed, by the app
    gemini_client = default_gemini_client() if quiz_scorer is None else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Talent Engine API starting up")
        try:
            yield
        finally:
            if gemini_client is not None:
                await gemini_client.aclose()
                logger.info("Closed Gemini client")

    app = FastAPI(
        title="Talent Engine API",
        description="Evidence-weighted confidence and recommendation engine",
        version="0.1.0-alpha",
        lifespan=lifespan,
    )

    store = evidence_store or EvidenceStore()
    scorer = quiz_scorer or default_quiz_scorer(gemini_client)
    target = target_confidence if target_confidence is not None else settings.target_confidence

    app.state.evidence_store = store
    app.state.quiz_scorer = scorer
    app.state.gemini_client = gemini_client
    app.state.target_confidence = target

    # === QUIZ ===

    @app.post("/quiz/score")
    async def score_quiz(req: QuizScoringRequest, uid: Optional[str] = None):
        """Score a quiz submission; degrades to neutral scores if the text service fails."""
        try:
            response = await scorer.score(req, uid=uid)
        except BudgetExceededError as err:
            raise HTTPException(402, str(err))
        return response.to_wire()

    # === AGENT ===

    @app.post("/agent/evaluate")
    def evaluate_agent(state: AgentState):
        """Rank the next actions for a state snapshot."""
        actions = evaluate_state(state)
        decision = make_decision(state, actions)
        return {
            "actions": [a.to_wire() for a in actions],
            "state": state.to_wire(),
            "decision": decision.to_wire(),
        }

    # === PROFILE ===

    @app.post("/profile/compute")
    def compute_profile(req: ProfileBuilderInput):
        return build_from_input(req).to_wire()

    @app.post("/confidence/profile")
    def confidence_profile(req: ConfidenceProfileRequest):
        """Confidence profile from assessment evidence, with its gaps."""
        profile = compute_profile_confidence(
            req.profile, req.data_insights, req.quiz_scores, req.session_insights
        )
        gaps = identify_gaps(
            profile, req.target_confidence if req.target_confidence is not None else target
        )
        return {
            "profile": profile.to_wire(),
            "gaps": [g.to_wire() for g in gaps],
        }

    # === SESSION ===

    @app.post("/session/summarize")
    def summarize_session(req: SessionArtifactsRequest):
        """Collapse duplicated live-session insights and signals."""
        summary = summarize_session_artifacts(req.insights, req.signals)
        return {
            "insights": [i.to_wire() for i in summary.insights],
            "signals": [s.to_wire() for s in summary.signals],
        }

    # === EVIDENCE ===

    @app.post("/evidence")
    def append_evidence(req: EvidenceAppendRequest):
        """Append one evidence atom to the log."""
        source = store.append(ConfidenceSource(
            type=req.type,
            dimension=req.dimension,
            score=req.score,
            evidence=req.evidence,
            timestamp=req.timestamp or datetime.utcnow(),
            origin=req.origin,
        ))
        return source.to_wire()

    @app.get("/evidence/{dimension}")
    def get_evidence(dimension: str):
        sources = store.get(dimension)
        if not sources:
            raise HTTPException(404, "No evidence for dimension")
        return [s.to_wire() for s in sources]

    @app.get("/confidence")
    def get_confidence():
        """Recompute the confidence profile from the evidence log."""
        profile = store.profile()
        return {
            "profile": profile.to_wire(),
            "gaps": [g.to_wire() for g in identify_gaps(profile, target)],
        }

    # === HEALTH ===

    @app.get("/health")
    def health():
        return {
            "status": "healthy",
            "evidence_count": store.count(),
            "text_scoring": scorer.text_scorer is not None,
        }

    return app
