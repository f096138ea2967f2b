"""
Triage session
Tracks which analysis invocation is current so stale results are dropped.
"""

import asyncio
import logging
from typing import Optional

from src.triage.models import TriageResult
from src.triage.orchestrator import TriageOrchestrator

logger = logging.getLogger(__name__)


class TriageSession:
    """
    Holds the current TriageResult for one consumer (a report view).

    Every `analyze` call takes a new generation number and cancels the
    in-flight invocation of the previous generation. Only the newest
    generation may publish to `current`.
    """

    def __init__(self, orchestrator: TriageOrchestrator):
        self.orchestrator = orchestrator
        self.current: Optional[TriageResult] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def analyze(self, report_id: str, description: str) -> Optional[TriageResult]:
        """
        Run an analysis that supersedes any earlier one.

        Returns:
            The TriageResult, or None if a newer call superseded this one
        """
        self._generation += 1
        generation = self._generation

        previous = self._task
        if previous is not None and not previous.done():
            logger.info(f"Superseding analysis generation {generation - 1} for {report_id}")
            previous.cancel()

        task = asyncio.ensure_future(self.orchestrator.analyze(report_id, description))
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if not self.is_current(generation):
                logger.debug(f"Generation {generation} cancelled after being superseded")
                return None
            raise
        finally:
            if self._task is task:
                self._task = None

        if not self.is_current(generation):
            logger.debug(f"Discarding stale result of generation {generation}")
            return None

        self.current = result
        return result

    def cancel(self) -> None:
        """Cancel the in-flight analysis, if any, and invalidate it."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
