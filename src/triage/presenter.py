"""
Result presenter
Turns a TriageResult into chart series and the analysis summary text.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from src.core.constants import UNAVAILABLE_LABEL
from src.triage.aspects import AspectRegistry, default_registry
from src.triage.models import AspectResult, ChartSeries, TriageResult

_CENTS = Decimal("0.01")


def to_percentage(score: float) -> float:
    """score x 100, rounded half-up to 2 decimals."""
    value = (Decimal(str(score)) * 100).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return float(value)


def format_percentage(score: float) -> str:
    return f"{to_percentage(score):.2f}%"


class ResultPresenter:
    """
    Deterministic rendering of triage results.

    Nothing is cached; every call recomputes from the TriageResult.
    """

    def __init__(self, registry: Optional[AspectRegistry] = None):
        self.registry = registry or default_registry

    def to_chart_series(self, aspect_result: AspectResult) -> List[ChartSeries]:
        """Ranked bar series, one entry per score."""
        return [
            ChartSeries(name=s.label, value=to_percentage(s.score))
            for s in aspect_result.scores
        ]

    def to_single_slice(self, aspect_result: AspectResult) -> List[ChartSeries]:
        """Single-slice distribution holding only the top label."""
        if not aspect_result.available or not aspect_result.scores:
            return []
        return [ChartSeries(name=aspect_result.top_label, value=100.0)]

    def summary_line(self, aspect_result: AspectResult) -> str:
        definition = self.registry.get_aspect(aspect_result.aspect_id)

        if not aspect_result.available:
            return f"{definition.display_name}: {UNAVAILABLE_LABEL}"

        line = f"{definition.display_name}: {aspect_result.top_label}"
        if definition.show_score and aspect_result.scores:
            line += f" ({format_percentage(aspect_result.top_score)})"
        return line

    def to_summary_text(self, result: TriageResult) -> str:
        """
        Fixed-template summary, one line per aspect in registry order.

        Example:
            Sentiment: negative (81.00%)
            Crime Type: theft
            Department: local police department
            Severity: medium
        """
        lines = []
        for definition in self.registry:
            aspect_result = result.aspects.get(definition.aspect_id)
            if aspect_result is None:
                aspect_result = AspectResult.unavailable(definition.aspect_id)
            lines.append(self.summary_line(aspect_result))
        return "\n".join(lines)

    def to_report(self, result: TriageResult) -> Dict[str, Any]:
        """JSON-ready payload with charts and summary for the API."""
        charts = {
            aspect_id: [s.to_dict() for s in self.to_chart_series(aspect_result)]
            for aspect_id, aspect_result in result.aspects.items()
        }
        severity = result.aspects.get("severity")

        return {
            "report_id": result.report_id,
            "computed_at": result.computed_at.isoformat(),
            "degraded": result.is_degraded,
            "failed_aspects": list(result.failed_aspects),
            "aspects": [
                {
                    "aspect_id": d.aspect_id,
                    "display_name": d.display_name,
                    "top_label": result.aspects[d.aspect_id].top_label,
                    "top_score": result.aspects[d.aspect_id].top_score,
                    "available": result.aspects[d.aspect_id].available,
                }
                for d in self.registry
                if d.aspect_id in result.aspects
            ],
            "charts": charts,
            "severity_distribution": (
                [s.to_dict() for s in self.to_single_slice(severity)] if severity else []
            ),
            "summary": self.to_summary_text(result),
        }
