"""
Aspect registry
Fixed table of the classification questions asked of every report.
"""

import logging
from types import MappingProxyType
from typing import Iterable, List, Optional

from src.core.constants import (
    SENTIMENT_LABELS,
    CRIME_CATEGORY_LABELS,
    ROUTING_DEPARTMENT_LABELS,
    SEVERITY_LABELS,
)
from src.triage.errors import InvalidInputError, UnknownAspectError
from src.triage.models import AspectDefinition

logger = logging.getLogger(__name__)


SENTIMENT = AspectDefinition(
    aspect_id="sentiment",
    candidate_labels=SENTIMENT_LABELS,
    display_name="Sentiment",
    show_score=True,
)

CRIME_CATEGORY = AspectDefinition(
    aspect_id="crime_category",
    candidate_labels=CRIME_CATEGORY_LABELS,
    display_name="Crime Type",
)

ROUTING_DEPARTMENT = AspectDefinition(
    aspect_id="routing_department",
    candidate_labels=ROUTING_DEPARTMENT_LABELS,
    display_name="Department",
)

SEVERITY = AspectDefinition(
    aspect_id="severity",
    candidate_labels=SEVERITY_LABELS,
    display_name="Severity",
)

# Presentation order downstream follows this order
DEFAULT_ASPECTS = (SENTIMENT, CRIME_CATEGORY, ROUTING_DEPARTMENT, SEVERITY)


class AspectRegistry:
    """
    Read-only mapping from aspect id to AspectDefinition.

    Definitions are validated once at construction; there is no API to add
    or remove aspects afterwards.
    """

    def __init__(self, definitions: Optional[Iterable[AspectDefinition]] = None):
        definitions = tuple(DEFAULT_ASPECTS if definitions is None else definitions)

        by_id = {}
        for definition in definitions:
            if definition.aspect_id in by_id:
                raise InvalidInputError(f"Duplicate aspect id: {definition.aspect_id}")
            if len(set(definition.candidate_labels)) < 2:
                raise InvalidInputError(
                    f"Aspect {definition.aspect_id} needs at least 2 distinct labels"
                )
            by_id[definition.aspect_id] = definition

        self._order = definitions
        self._by_id = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self):
        return iter(self._order)

    def __contains__(self, aspect_id: object) -> bool:
        return aspect_id in self._by_id

    @property
    def aspect_ids(self) -> List[str]:
        return [d.aspect_id for d in self._order]

    def list_aspects(self) -> List[AspectDefinition]:
        """Get all aspects in registry order."""
        return list(self._order)

    def get_aspect(self, aspect_id: str) -> AspectDefinition:
        """
        Get an aspect definition by id.

        Raises:
            UnknownAspectError: if the id is not registered
        """
        try:
            return self._by_id[aspect_id]
        except KeyError:
            logger.error(f"Lookup of unregistered aspect: {aspect_id}")
            raise UnknownAspectError(aspect_id) from None


default_registry = AspectRegistry()


def list_aspects() -> List[AspectDefinition]:
    """List the default aspects in registry order."""
    return default_registry.list_aspects()


def get_aspect(aspect_id: str) -> AspectDefinition:
    """Get a default aspect by id."""
    return default_registry.get_aspect(aspect_id)
