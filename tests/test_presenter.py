"""
Tests for the triage result presenter
"""
import asyncio
import pytest
from datetime import datetime, timezone

from src.triage.models import AspectResult, ChartSeries, ClassificationScore, TriageResult
from src.triage.orchestrator import TriageOrchestrator
from src.triage.presenter import ResultPresenter, format_percentage, to_percentage

GOLDEN_THEFT_SUMMARY = (
    "Sentiment: negative (81.00%)\n"
    "Crime Type: theft\n"
    "Department: local police department\n"
    "Severity: medium"
)


def scores(*pairs):
    return tuple(ClassificationScore(label, score) for label, score in pairs)


class TestPercentages:
    """Test score to percentage conversion."""

    @pytest.mark.parametrize("score,expected", [
        (0.81, 81.0),
        (0.04, 4.0),
        (1.0, 100.0),
        (0.0, 0.0),
        (0.12345, 12.35),
        (0.98765, 98.77),
        (0.333333, 33.33),
        (0.00005, 0.01),
    ])
    def test_half_up_rounding(self, score, expected):
        assert to_percentage(score) == expected

    def test_format(self):
        assert format_percentage(0.81) == "81.00%"
        assert format_percentage(0.5) == "50.00%"


class TestChartSeries:
    """Test suite for chart series derivation."""

    def setup_method(self):
        self.presenter = ResultPresenter()

    def test_series_matches_scores(self):
        aspect = AspectResult.from_scores(
            "sentiment", scores(("negative", 0.81), ("neutral", 0.15), ("positive", 0.04))
        )
        series = self.presenter.to_chart_series(aspect)

        assert series == [
            ChartSeries("negative", 81.0),
            ChartSeries("neutral", 15.0),
            ChartSeries("positive", 4.0),
        ]

    def test_length_and_values(self):
        aspect = AspectResult.from_scores(
            "severity", scores(("high", 0.61234), ("medium", 0.2875), ("low", 0.10016))
        )
        series = self.presenter.to_chart_series(aspect)

        assert len(series) == len(aspect.scores)
        assert [s.name for s in series] == ["high", "medium", "low"]
        assert [s.value for s in series] == [61.23, 28.75, 10.02]

    def test_unavailable_has_no_series(self):
        assert self.presenter.to_chart_series(AspectResult.unavailable("severity")) == []

    def test_single_slice(self):
        aspect = AspectResult.from_scores("severity", scores(("medium", 0.55), ("high", 0.3), ("low", 0.15)))
        assert self.presenter.to_single_slice(aspect) == [ChartSeries("medium", 100.0)]

    def test_single_slice_unavailable(self):
        assert self.presenter.to_single_slice(AspectResult.unavailable("severity")) == []


class TestSummaryText:
    """Golden output for the analysis summary."""

    def setup_method(self):
        self.presenter = ResultPresenter()

    def test_end_to_end_theft_report(self, fake_classifier, theft_responses, market_theft_description):
        orchestrator = TriageOrchestrator(fake_classifier(theft_responses), timeout_seconds=1)
        result = asyncio.run(orchestrator.analyze("-Nrecent", market_theft_description))

        assert self.presenter.to_summary_text(result) == GOLDEN_THEFT_SUMMARY

    def test_unavailable_aspect(self, fake_classifier, theft_responses, market_theft_description):
        responses = dict(theft_responses, routing_department="hang")
        orchestrator = TriageOrchestrator(fake_classifier(responses), timeout_seconds=0.05)
        result = asyncio.run(orchestrator.analyze("-Nrecent", market_theft_description))

        assert self.presenter.to_summary_text(result) == (
            "Sentiment: negative (81.00%)\n"
            "Crime Type: theft\n"
            "Department: unavailable\n"
            "Severity: medium"
        )

    def test_unavailable_sentiment_has_no_percentage(self):
        result = TriageResult(
            report_id="-Nx",
            aspects={
                "sentiment": AspectResult.unavailable("sentiment"),
                "crime_category": AspectResult.unavailable("crime_category"),
                "routing_department": AspectResult.unavailable("routing_department"),
                "severity": AspectResult.unavailable("severity"),
            },
            failed_aspects=("sentiment", "crime_category", "routing_department", "severity"),
        )

        assert self.presenter.to_summary_text(result) == (
            "Sentiment: unavailable\n"
            "Crime Type: unavailable\n"
            "Department: unavailable\n"
            "Severity: unavailable"
        )

    def test_degenerate_output_renders_unknown(self):
        result = TriageResult(
            report_id="-Nx",
            aspects={
                "sentiment": AspectResult.from_scores("sentiment", ()),
                "crime_category": AspectResult.from_scores("crime_category", ()),
                "routing_department": AspectResult.from_scores("routing_department", ()),
                "severity": AspectResult.from_scores("severity", ()),
            },
        )

        assert self.presenter.to_summary_text(result) == (
            "Sentiment: unknown\n"
            "Crime Type: unknown\n"
            "Department: unknown\n"
            "Severity: unknown"
        )


class TestReportPayload:
    def test_payload(self, fake_classifier, theft_responses, market_theft_description):
        orchestrator = TriageOrchestrator(fake_classifier(theft_responses), timeout_seconds=1)
        result = asyncio.run(orchestrator.analyze("-Nrecent", market_theft_description))

        payload = ResultPresenter().to_report(result)

        assert payload["report_id"] == "-Nrecent"
        assert payload["degraded"] is False
        assert [a["aspect_id"] for a in payload["aspects"]] == [
            "sentiment", "crime_category", "routing_department", "severity"
        ]
        assert payload["charts"]["sentiment"] == [
            {"name": "negative", "value": 81.0},
            {"name": "neutral", "value": 15.0},
            {"name": "positive", "value": 4.0},
        ]
        assert payload["severity_distribution"] == [{"name": "medium", "value": 100.0}]
        assert payload["summary"] == GOLDEN_THEFT_SUMMARY
        assert datetime.fromisoformat(payload["computed_at"]).tzinfo == timezone.utc
