"""
Zero-shot classification clients for CrimeWatch Triage

Each call sends one description and a candidate label set to an external
classifier and returns the labels ranked by confidence.

Backends:
- Hosted zero-shot inference (facebook/bart-large-mnli by default)
- Local analysis endpoint returning a `sentiment_scores` list

API Documentation: https://huggingface.co/docs/api-inference/tasks/zero-shot-classification
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from src.core.config import Settings, settings as default_settings
from src.triage.errors import ClassificationUnavailableError, InvalidInputError
from src.triage.models import AspectResult, ClassificationScore

logger = logging.getLogger(__name__)


def validate_inputs(text: str, candidate_labels: Sequence[str]) -> Tuple[str, ...]:
    """
    Check classify() arguments before any request is issued.

    Returns:
        Candidate labels as a tuple

    Raises:
        InvalidInputError: empty text or fewer than 2 distinct labels
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidInputError("Text to classify must not be empty")

    labels = tuple(candidate_labels or ())
    if any(not isinstance(label, str) or not label.strip() for label in labels):
        raise InvalidInputError("Candidate labels must be non-empty strings")
    if len(set(labels)) < 2:
        raise InvalidInputError("At least 2 distinct candidate labels are required")

    return labels


def rank_scores(
    labels: Sequence[Any],
    scores: Sequence[Any],
    candidate_labels: Sequence[str],
    aspect_id: Optional[str] = None
) -> List[ClassificationScore]:
    """
    Validate a labels/scores pair and rank it.

    Scores are sorted descending; equal scores keep the candidate-label
    order. Scores are not renormalised.

    Raises:
        ClassificationUnavailableError: on any malformed payload
    """
    labels = list(labels)
    scores = list(scores)

    if len(labels) != len(scores):
        raise ClassificationUnavailableError(
            f"Mismatched response lengths: {len(labels)} labels, {len(scores)} scores",
            aspect_id,
        )
    if not labels:
        return []
    if len(labels) != len(candidate_labels):
        raise ClassificationUnavailableError(
            f"Expected {len(candidate_labels)} scores, got {len(labels)}",
            aspect_id,
        )

    rank = {label: i for i, label in enumerate(candidate_labels)}
    seen = set()
    ranked = []

    for label, score in zip(labels, scores):
        if not isinstance(label, str) or label not in rank or label in seen:
            raise ClassificationUnavailableError(f"Unexpected label: {label!r}", aspect_id)
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ClassificationUnavailableError(f"Non-numeric score: {score!r}", aspect_id)
        if not 0.0 <= score <= 1.0:
            raise ClassificationUnavailableError(f"Score out of range: {score!r}", aspect_id)
        seen.add(label)
        ranked.append(ClassificationScore(label=label, score=float(score)))

    ranked.sort(key=lambda s: (-s.score, rank[s.label]))
    return ranked


class ClassifierClient(ABC):
    """
    Contract for a single zero-shot classification call.

    Subclasses implement `_request` (one outbound call) and `_extract`
    (payload -> labels, scores). No retries happen here.
    """

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize classifier client.

        Args:
            timeout: HTTP request timeout in seconds
            client: Optional pre-configured async HTTP client
        """
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def classify(
        self,
        text: str,
        candidate_labels: Sequence[str],
        aspect_id: Optional[str] = None
    ) -> AspectResult:
        """
        Classify text against candidate labels.

        Args:
            text: Non-empty text to classify
            candidate_labels: At least 2 distinct labels
            aspect_id: Aspect context for results and errors

        Returns:
            AspectResult with ranked scores

        Raises:
            InvalidInputError: bad arguments (no request issued)
            ClassificationUnavailableError: network, timeout or payload failure
        """
        labels = validate_inputs(text, candidate_labels)
        aspect_id = aspect_id or "adhoc"

        try:
            response = await self._request(text, labels)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise ClassificationUnavailableError(f"Classifier timed out: {e}", aspect_id) from e
        except httpx.HTTPStatusError as e:
            raise ClassificationUnavailableError(
                f"Classifier returned HTTP {e.response.status_code}", aspect_id
            ) from e
        except httpx.HTTPError as e:
            raise ClassificationUnavailableError(f"Classifier request failed: {e}", aspect_id) from e
        except ValueError as e:
            raise ClassificationUnavailableError("Classifier returned invalid JSON", aspect_id) from e

        result_labels, result_scores = self._extract(payload, aspect_id)
        ranked = rank_scores(result_labels, result_scores, labels, aspect_id)

        logger.debug(f"Classified aspect {aspect_id}: {ranked[0].label if ranked else 'unknown'}")

        return AspectResult.from_scores(aspect_id, ranked)

    @abstractmethod
    async def _request(self, text: str, candidate_labels: Tuple[str, ...]) -> httpx.Response:
        """Issue exactly one classification request."""
        ...

    @abstractmethod
    def _extract(self, payload: Any, aspect_id: str) -> Tuple[List[Any], List[Any]]:
        """Pull parallel labels/scores lists out of a response payload."""
        ...


class ZeroShotClassifierClient(ClassifierClient):
    """
    Client for a hosted zero-shot classification model.

    Usage:
        async with ZeroShotClassifierClient(url, api_token="hf_...") as client:
            result = await client.classify(text, ["low", "medium", "high"])

    Request:  {"inputs": text, "parameters": {"candidate_labels": [...]}}
    Response: {"labels": [...], "scores": [...]}
    """

    def __init__(
        self,
        endpoint: str,
        api_token: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(timeout=timeout, client=client)
        self.endpoint = endpoint
        self.api_token = api_token

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def _request(self, text: str, candidate_labels: Tuple[str, ...]) -> httpx.Response:
        body = {
            "inputs": text,
            "parameters": {"candidate_labels": list(candidate_labels)},
        }
        return await self._get_client().post(self.endpoint, json=body, headers=self._headers())

    def _extract(self, payload: Any, aspect_id: str) -> Tuple[List[Any], List[Any]]:
        # Some inference routers answer with [{"label": ..., "score": ...}, ...]
        if isinstance(payload, list) and all(isinstance(p, dict) for p in payload):
            return _split_pairs(payload, aspect_id)

        if not isinstance(payload, dict):
            raise ClassificationUnavailableError("Unexpected response payload", aspect_id)
        if "error" in payload:
            raise ClassificationUnavailableError(f"Classifier error: {payload['error']}", aspect_id)

        labels = payload.get("labels")
        scores = payload.get("scores")
        if not isinstance(labels, list) or not isinstance(scores, list):
            raise ClassificationUnavailableError("Response is missing labels or scores", aspect_id)

        return labels, scores


class LocalAnalysisClassifierClient(ClassifierClient):
    """
    Client for a self-hosted analysis endpoint.

    Request:  {"text": text, "candidate_labels": [...]}
    Response: {"sentiment_scores": [{"label": ..., "score": ...}, ...]}
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(timeout=timeout, client=client)
        self.endpoint = endpoint

    async def _request(self, text: str, candidate_labels: Tuple[str, ...]) -> httpx.Response:
        body = {"text": text, "candidate_labels": list(candidate_labels)}
        return await self._get_client().post(self.endpoint, json=body)

    def _extract(self, payload: Any, aspect_id: str) -> Tuple[List[Any], List[Any]]:
        if not isinstance(payload, dict) or not isinstance(payload.get("sentiment_scores"), list):
            raise ClassificationUnavailableError("Response is missing sentiment_scores", aspect_id)
        return _split_pairs(payload["sentiment_scores"], aspect_id)


def _split_pairs(pairs: List[Any], aspect_id: str) -> Tuple[List[Any], List[Any]]:
    """Split [{"label", "score"}, ...] into parallel lists."""
    labels, scores = [], []
    for pair in pairs:
        if not isinstance(pair, dict) or "label" not in pair or "score" not in pair:
            raise ClassificationUnavailableError("Malformed label/score entry", aspect_id)
        labels.append(pair["label"])
        scores.append(pair["score"])
    return labels, scores


def create_classifier_client(config: Optional[Settings] = None) -> ClassifierClient:
    """
    Build the classifier backend selected in settings.

    Args:
        config: Settings to use (defaults to the global settings)

    Returns:
        ClassifierClient for `classifier_backend`
    """
    config = config or default_settings
    backend = config.classifier_backend.lower()

    if backend == "local":
        logger.info(f"Using local analysis classifier at {config.local_analysis_url}")
        return LocalAnalysisClassifierClient(
            config.local_analysis_url,
            timeout=config.classifier_timeout_seconds,
        )
    if backend == "zero_shot":
        logger.info(f"Using zero-shot classifier {config.zero_shot_model}")
        return ZeroShotClassifierClient(
            config.zero_shot_endpoint,
            api_token=config.hf_api_token,
            timeout=config.classifier_timeout_seconds,
        )

    raise ValueError(f"Unknown classifier backend: {config.classifier_backend}")
