"""
CrimeWatch Triage - Triage Module
Multi-aspect zero-shot classification of incident descriptions.
"""

from src.triage.errors import (
    TriageError,
    InvalidInputError,
    ClassificationUnavailableError,
    UnknownAspectError,
)
from src.triage.models import (
    AspectDefinition,
    ClassificationScore,
    AspectResult,
    TriageResult,
    ChartSeries,
)
from src.triage.aspects import AspectRegistry, default_registry, list_aspects, get_aspect
from src.triage.classifier_client import (
    ClassifierClient,
    ZeroShotClassifierClient,
    LocalAnalysisClassifierClient,
    create_classifier_client,
)
from src.triage.orchestrator import TriageOrchestrator
from src.triage.session import TriageSession
from src.triage.presenter import ResultPresenter

__all__ = [
    # Errors
    "TriageError",
    "InvalidInputError",
    "ClassificationUnavailableError",
    "UnknownAspectError",
    # Models
    "AspectDefinition",
    "ClassificationScore",
    "AspectResult",
    "TriageResult",
    "ChartSeries",
    # Registry
    "AspectRegistry",
    "default_registry",
    "list_aspects",
    "get_aspect",
    # Classifier
    "ClassifierClient",
    "ZeroShotClassifierClient",
    "LocalAnalysisClassifierClient",
    "create_classifier_client",
    # Orchestration and presentation
    "TriageOrchestrator",
    "TriageSession",
    "ResultPresenter",
]
