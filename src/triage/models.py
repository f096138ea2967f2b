"""
Triage data model
Immutable value types passed between classifier, orchestrator and presenter.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Sequence, Tuple

from src.core.constants import UNAVAILABLE_LABEL, UNKNOWN_LABEL


@dataclass(frozen=True)
class AspectDefinition:
    """
    One classification question asked of a report description.

    Attributes:
        aspect_id: Unique registry key
        candidate_labels: Ordered labels offered to the zero-shot classifier
        display_name: Human-readable name used in summaries
        show_score: Whether the summary line carries the top score
    """
    aspect_id: str
    candidate_labels: Tuple[str, ...]
    display_name: str
    show_score: bool = False

    def label_rank(self, label: str) -> int:
        """Position of a label in the declared candidate order."""
        return self.candidate_labels.index(label)


@dataclass(frozen=True)
class ClassificationScore:
    """Confidence of a single candidate label (0-1)."""
    label: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "score": self.score}


@dataclass(frozen=True)
class AspectResult:
    """Ranked classifier output for one aspect."""
    aspect_id: str
    scores: Tuple[ClassificationScore, ...]
    top_label: str
    top_score: float
    available: bool = True

    @classmethod
    def from_scores(
        cls,
        aspect_id: str,
        scores: Sequence[ClassificationScore]
    ) -> "AspectResult":
        """Build a result from already-ranked scores."""
        scores = tuple(scores)
        if not scores:
            return cls(
                aspect_id=aspect_id,
                scores=(),
                top_label=UNKNOWN_LABEL,
                top_score=0.0,
            )
        return cls(
            aspect_id=aspect_id,
            scores=scores,
            top_label=scores[0].label,
            top_score=scores[0].score,
        )

    @classmethod
    def unavailable(cls, aspect_id: str) -> "AspectResult":
        """Placeholder for an aspect whose classification failed."""
        return cls(
            aspect_id=aspect_id,
            scores=(),
            top_label=UNAVAILABLE_LABEL,
            top_score=0.0,
            available=False,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aspect_id": self.aspect_id,
            "scores": [s.to_dict() for s in self.scores],
            "top_label": self.top_label,
            "top_score": self.top_score,
            "available": self.available,
        }


@dataclass(frozen=True)
class TriageResult:
    """
    Outcome of one analysis invocation.

    `aspects` is a read-only mapping in registry order. `failed_aspects`
    lists the aspect ids that fell back to the "unavailable" placeholder.
    """
    report_id: str
    aspects: Mapping[str, AspectResult]
    failed_aspects: Tuple[str, ...] = ()
    computed_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self):
        if not isinstance(self.aspects, MappingProxyType):
            object.__setattr__(self, "aspects", MappingProxyType(dict(self.aspects)))

    @property
    def is_degraded(self) -> bool:
        return bool(self.failed_aspects)

    def to_dict(self, include_timestamp: bool = True) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "report_id": self.report_id,
            "aspects": {k: v.to_dict() for k, v in self.aspects.items()},
            "failed_aspects": list(self.failed_aspects),
        }
        if include_timestamp:
            data["computed_at"] = self.computed_at.isoformat()
        return data


@dataclass(frozen=True)
class ChartSeries:
    """Chart-ready data point; value is a percentage (0-100)."""
    name: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}
