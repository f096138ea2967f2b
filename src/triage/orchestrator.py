"""
Triage orchestrator
Fans out one classification per registered aspect and assembles the result.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from src.core.config import settings
from src.triage.aspects import AspectRegistry, default_registry
from src.triage.classifier_client import ClassifierClient
from src.triage.errors import ClassificationUnavailableError, InvalidInputError
from src.triage.models import AspectDefinition, AspectResult, TriageResult

logger = logging.getLogger(__name__)


class TriageOrchestrator:
    """
    Runs the multi-aspect triage of a report description.

    All aspect classifications are issued concurrently; total latency is
    bounded by the slowest call (or the per-call timeout). A failing aspect
    is replaced by an "unavailable" placeholder instead of failing the run.
    """

    def __init__(
        self,
        classifier: ClassifierClient,
        registry: Optional[AspectRegistry] = None,
        timeout_seconds: Optional[float] = None,
        retries: Optional[int] = None
    ):
        """
        Initialize orchestrator.

        Args:
            classifier: Classification backend
            registry: Aspects to evaluate (defaults to the built-in registry)
            timeout_seconds: Fixed timeout per classification call
            retries: Extra attempts per aspect after a failure
        """
        self.classifier = classifier
        self.registry = registry or default_registry
        self.timeout_seconds = (
            settings.classifier_timeout_seconds if timeout_seconds is None else timeout_seconds
        )
        self.retries = max(0, settings.classifier_retries if retries is None else retries)

    async def analyze(self, report_id: str, description: str) -> TriageResult:
        """
        Triage a report description.

        Args:
            report_id: Report the description belongs to
            description: Free-text incident description

        Returns:
            TriageResult covering every registered aspect

        Raises:
            InvalidInputError: empty description (before any call is issued)
        """
        if not isinstance(description, str) or not description.strip():
            raise InvalidInputError("Report description must not be empty")

        aspects = self.registry.list_aspects()
        logger.info(f"Analyzing report {report_id} across {len(aspects)} aspects")

        outcomes = await asyncio.gather(
            *(self._classify_aspect(aspect, description) for aspect in aspects)
        )

        results = {}
        failed = []
        for aspect, outcome in zip(aspects, outcomes):
            if outcome is None:
                results[aspect.aspect_id] = AspectResult.unavailable(aspect.aspect_id)
                failed.append(aspect.aspect_id)
            else:
                results[aspect.aspect_id] = outcome

        result = TriageResult(
            report_id=report_id,
            aspects=results,
            failed_aspects=tuple(failed),
            computed_at=datetime.now(timezone.utc),
        )

        if failed:
            logger.warning(
                f"Report {report_id} triage degraded: {len(failed)}/{len(aspects)} aspects unavailable"
            )
        else:
            logger.info(f"Report {report_id} triage complete")

        return result

    async def _classify_aspect(
        self,
        aspect: AspectDefinition,
        description: str
    ) -> Optional[AspectResult]:
        """Classify one aspect; None when every attempt failed."""
        for attempt in range(self.retries + 1):
            try:
                return await asyncio.wait_for(
                    self.classifier.classify(
                        description, aspect.candidate_labels, aspect.aspect_id
                    ),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Aspect {aspect.aspect_id} timed out after {self.timeout_seconds}s "
                    f"(attempt {attempt + 1})"
                )
            except ClassificationUnavailableError as e:
                logger.warning(f"Aspect {aspect.aspect_id} unavailable (attempt {attempt + 1}): {e}")

        return None
