"""Tests for the live-session summarizer."""

from datetime import datetime

import pytest

from talent_engine.career.profile_builder import build_computed_profile
from talent_engine.models.profile import SessionInsight, UserSignal
from talent_engine.session.summary import (
    SUMMARY_SOURCE,
    normalize_text,
    summarize_session_artifacts,
)

T0 = datetime(2026, 3, 1, 12, 0, 0)
T1 = datetime(2026, 3, 1, 12, 5, 0)
T2 = datetime(2026, 3, 1, 12, 10, 0)


def _make_insight(observation, confidence, timestamp, category="interpersonal", evidence="") -> SessionInsight:
    return SessionInsight(
        category=category,
        observation=observation,
        confidence=confidence,
        timestamp=timestamp,
        evidence=evidence,
    )


def _make_signal(text, confidence, timestamp, dimensions=(), evidence="") -> UserSignal:
    return UserSignal(
        signal=text,
        confidence=confidence,
        timestamp=timestamp,
        dimensions=list(dimensions),
        evidence=evidence,
    )


class TestNormalizeText:
    def test_punctuation_and_case(self):
        assert normalize_text("  Warm, engaged -- TONE! ") == "warm engaged tone"


class TestInsightSummary:
    def test_duplicates_collapse(self):
        summary = summarize_session_artifacts([
            _make_insight("Warm and engaged", 0.6, T0, evidence="smiled"),
            _make_insight("warm, and engaged!", 80, T2, evidence="laughed"),
        ], [])

        assert len(summary.insights) == 1
        merged = summary.insights[0]
        # 0.6 and 80 -> 0.8, averaged
        assert merged.confidence == pytest.approx(0.7)
        assert merged.timestamp == T2
        assert merged.observation == "Warm and engaged"
        assert merged.evidence == "smiled; laughed"

    def test_different_categories_stay_apart(self):
        summary = summarize_session_artifacts([
            _make_insight("Clear answer", 0.5, T0, category="analytical"),
            _make_insight("Clear answer", 0.5, T1, category="creative"),
        ], [])
        assert [i.category for i in summary.insights] == ["analytical", "creative"]

    def test_ordered_by_timestamp(self):
        summary = summarize_session_artifacts([
            _make_insight("Late", 0.5, T2),
            _make_insight("Early", 0.5, T0),
        ], [])
        assert [i.observation for i in summary.insights] == ["Early", "Late"]

    def test_summarized_insights_count_once_in_support(self):
        insights = [_make_insight("Warm and engaged", 0.5, T0) for _ in range(3)]
        raw = build_computed_profile({"Social": 50}, session_insights=insights)
        summarized = build_computed_profile(
            {"Social": 50},
            session_insights=summarize_session_artifacts(insights, []).insights,
        )
        # 15 + 45 + min(15, 3 * 5) vs 15 + 45 + 1 * 5
        assert raw.confidence_scores["Social"] == 75
        assert summarized.confidence_scores["Social"] == 65


class TestSignalSummary:
    def test_duplicates_merge_dimensions(self):
        summary = summarize_session_artifacts([], [
            _make_signal("Leads group projects", 0.9, T0, ["leadership"]),
            _make_signal("leads group projects.", 0.5, T1, ["Teamwork", "not_a_dimension"]),
        ])

        assert len(summary.signals) == 1
        signal = summary.signals[0]
        assert signal.confidence == pytest.approx(0.7)
        assert signal.dimensions == ["leadership", "teamwork"]
        assert signal.source == SUMMARY_SOURCE
        assert signal.timestamp == T1
        assert signal.id == "signal_summarized_20260301T120500_0"

    def test_dimensions_inferred_from_text(self):
        summary = summarize_session_artifacts([], [
            _make_signal("Strong communication in every answer", 0.7, T0),
        ])
        assert summary.signals[0].dimensions == ["communication"]

    def test_dimensions_inferred_from_insight_category(self):
        summary = summarize_session_artifacts(
            [_make_insight("Breaks problems down", 0.8, T0, category="analytical")],
            [_make_signal("Very analytical approach", 0.6, T1)],
        )
        # Only weights >= 0.5 of the analytical category
        assert set(summary.signals[0].dimensions) == {"clarity_structure", "analytical_thinking"}

    def test_deterministic(self):
        signals = [
            _make_signal("Builds robots", 0.4, T2, ["Realistic"]),
            _make_signal("Writes music", 0.8, T0, ["Artistic"]),
        ]
        first = summarize_session_artifacts([], signals)
        assert first == summarize_session_artifacts([], signals)
        assert [s.signal for s in first.signals] == ["Writes music", "Builds robots"]
