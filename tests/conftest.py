"""
Pytest configuration and fixtures
"""
import asyncio
import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.triage.classifier_client import rank_scores, validate_inputs
from src.triage.models import AspectResult


class FakeClassifier:
    """
    In-process stand-in for the classification service.

    `responses` maps aspect id to {label: score}, an exception instance to
    raise, or "hang" to never answer. It may also be a callable taking the
    text and returning such a mapping. When `gate` is set, calls whose text
    contains `gated_text` wait for the gate before answering.
    """

    def __init__(self, responses, gate=None, gated_text=None):
        self.responses = responses
        self.gate = gate
        self.gated_text = gated_text
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled = 0

    async def classify(self, text, candidate_labels, aspect_id=None):
        labels = validate_inputs(text, candidate_labels)
        self.calls.append(aspect_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.gate is not None and (self.gated_text is None or self.gated_text in text):
                await self.gate.wait()

            responses = self.responses(text) if callable(self.responses) else self.responses
            response = responses.get(aspect_id, {})
            if isinstance(response, BaseException):
                raise response
            if response == "hang":
                await asyncio.sleep(3600)

            ranked = rank_scores(list(response.keys()), list(response.values()), labels, aspect_id)
            return AspectResult.from_scores(aspect_id, ranked)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_classifier():
    """Factory for FakeClassifier instances."""
    return FakeClassifier


@pytest.fixture
def market_theft_description():
    return "A man grabbed my bag and ran away near the market"


@pytest.fixture
def theft_responses():
    """Classifier output for the market bag-snatching report."""
    return {
        "sentiment": {"negative": 0.81, "neutral": 0.15, "positive": 0.04},
        "crime_category": {
            "theft": 0.92,
            "assault": 0.03,
            "fraud": 0.02,
            "drug-related": 0.01,
            "vandalism": 0.01,
            "cybercrime": 0.01,
        },
        "routing_department": {
            "local police department": 0.77,
            "women safety cell": 0.08,
            "economic offenses wing": 0.05,
            "narcotics control bureau": 0.03,
            "cyber crime investigation unit": 0.03,
            "traffic control department": 0.02,
            "anti-terrorism squad": 0.02,
        },
        "severity": {"medium": 0.55, "high": 0.30, "low": 0.15},
    }


@pytest.fixture
def fraud_responses():
    """Classifier output for an online payment fraud report."""
    return {
        "sentiment": {"negative": 0.64, "neutral": 0.33, "positive": 0.03},
        "crime_category": {
            "fraud": 0.71,
            "cybercrime": 0.22,
            "theft": 0.04,
            "assault": 0.01,
            "drug-related": 0.01,
            "vandalism": 0.01,
        },
        "routing_department": {
            "cyber crime investigation unit": 0.58,
            "economic offenses wing": 0.30,
            "local police department": 0.07,
            "narcotics control bureau": 0.02,
            "women safety cell": 0.01,
            "anti-terrorism squad": 0.01,
            "traffic control department": 0.01,
        },
        "severity": {"high": 0.48, "medium": 0.41, "low": 0.11},
    }


@pytest.fixture
def crime_records():
    """Records as stored under `crimes` in the realtime database."""
    return {
        "-Nrecent": {
            "fullName": "Asha Verma",
            "phoneNumber": "9876543210",
            "email": "asha@example.com",
            "crimeType": "theft",
            "date": "2026-10-19",
            "time": "10:15",
            "location": "Central Market, Surat",
            "description": "A man grabbed my bag and ran away near the market",
            "imageUrls": ["https://res.cloudinary.com/demo/image/upload/bag.jpg"],
            "coordinates": {"lat": "21.1702", "lon": "72.8311"},
            "timestamp": "2026-10-19T10:30:00+00:00",
            "userId": "uid-citizen",
        },
        "-Nyesterday": {
            "type": "fraud",
            "location": "Online",
            "description": "Someone charged my card after a fake delivery call",
            "timestamp": 1792324800000,  # 2026-10-18T12:00:00Z
        },
        "-Nlastweek": {
            "crimeType": "vandalism",
            "location": "Station Road",
            "description": "Bus stop glass smashed overnight",
            "timestamp": "2026-10-14T09:00:00Z",
        },
    }


@pytest.fixture
def user_records():
    return {
        "uid-citizen": {
            "fullName": "Asha Verma",
            "email": "asha@example.com",
            "usertype": "citizen",
            "createdAt": "2026-01-02T08:00:00+00:00",
            "phone": "9876543210",
        },
    }


@pytest.fixture
def report_database(crime_records, user_records):
    """Mocked realtime database answering reads by path."""
    def get(path):
        if path == "crimes":
            return crime_records
        if path.startswith("crimes/"):
            return crime_records.get(path.split("/", 1)[1])
        if path.startswith("users/"):
            return user_records.get(path.split("/", 1)[1])
        return None

    database = MagicMock()
    database.get.side_effect = get
    database.push.return_value = "-Nnew"
    return database
