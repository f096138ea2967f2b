"""
Tests for API endpoints
"""
import asyncio
import pytest
from unittest.mock import patch, MagicMock

import httpx
from fastapi.testclient import TestClient

import src.api.main as api
from src.core.errors import DocumentStoreError, IdentityError
from src.crowdsource.report_handler import ReportHandler
from src.integrations.identity_client import AuthSession
from src.triage.orchestrator import TriageOrchestrator


class TestAPIEndpoints:
    """Test suite for API endpoints."""

    @pytest.fixture(autouse=True)
    def setup_api(self, report_database, fake_classifier, theft_responses):
        api._sessions.clear()
        self.database = report_database
        self.handler = ReportHandler(self.database, identity_client=MagicMock())
        self.classifier = fake_classifier(theft_responses)
        self.orchestrator = TriageOrchestrator(self.classifier, timeout_seconds=1)

        with patch("src.api.main.get_report_handler", return_value=self.handler), \
                patch("src.api.main.get_orchestrator", return_value=self.orchestrator):
            self.client = TestClient(api.app)
            yield

        api._sessions.clear()

    def test_health(self):
        response = self.client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == api.VERSION
        assert "classifier" in data["modules"]

    def test_list_aspects(self):
        response = self.client.get("/api/v1/aspects")

        assert response.status_code == 200
        aspects = response.json()
        assert [a["aspect_id"] for a in aspects] == [
            "sentiment", "crime_category", "routing_department", "severity"
        ]
        assert aspects[0]["candidate_labels"] == ["positive", "neutral", "negative"]

    def test_triage_description(self, market_theft_description):
        response = self.client.post("/api/v1/triage", json={"description": market_theft_description})

        assert response.status_code == 200
        data = response.json()
        assert data["report_id"] == "adhoc"
        assert data["degraded"] is False
        assert data["summary"].startswith("Sentiment: negative (81.00%)")
        assert data["charts"]["crime_category"][0] == {"name": "theft", "value": 92.0}

    def test_triage_blank_description(self):
        response = self.client.post("/api/v1/triage", json={"description": "   "})

        assert response.status_code == 400
        assert self.classifier.calls == []

    def test_triage_empty_description_rejected_by_schema(self):
        response = self.client.post("/api/v1/triage", json={"description": ""})
        assert response.status_code == 422

    def test_analyze_stored_report(self):
        response = self.client.post("/api/v1/reports/-Nrecent/analyze")

        assert response.status_code == 200
        data = response.json()
        assert data["report_id"] == "-Nrecent"
        assert data["severity_distribution"] == [{"name": "medium", "value": 100.0}]
        assert len(self.classifier.calls) == 4
        assert "-Nrecent" not in api._sessions

    def test_analyze_degraded_report(self, fake_classifier, theft_responses):
        self.orchestrator.classifier = fake_classifier(dict(theft_responses, severity="hang"))
        self.orchestrator.timeout_seconds = 0.05

        response = self.client.post("/api/v1/reports/-Nrecent/analyze")

        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is True
        assert data["failed_aspects"] == ["severity"]
        assert data["summary"].endswith("Severity: unavailable")
        assert data["severity_distribution"] == []

    def test_analyze_superseded_by_newer_request(self):
        """Test a re-analysis answers 409 to the earlier request."""
        async def scenario():
            self.classifier.gate = asyncio.Event()
            transport = httpx.ASGITransport(app=api.app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                first = asyncio.ensure_future(client.post("/api/v1/reports/-Nrecent/analyze"))
                for _ in range(500):
                    if self.classifier.in_flight == 4:
                        break
                    await asyncio.sleep(0.01)
                assert self.classifier.in_flight == 4
                await asyncio.sleep(0.01)

                # The newer analysis is not held back
                self.classifier.gate = None
                second = await client.post("/api/v1/reports/-Nrecent/analyze")
                return await first, second

        first, second = asyncio.run(scenario())

        assert first.status_code == 409
        assert second.status_code == 200
        assert second.json()["summary"].startswith("Sentiment: negative (81.00%)")
        assert self.classifier.cancelled == 4
        assert "-Nrecent" not in api._sessions

    def test_analyze_missing_report(self):
        response = self.client.post("/api/v1/reports/-Nmissing/analyze")
        assert response.status_code == 404

    def test_list_reports(self):
        response = self.client.get("/api/v1/reports")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert [r["id"] for r in data["reports"]] == ["-Nrecent", "-Nyesterday", "-Nlastweek"]

    def test_list_reports_limit(self):
        response = self.client.get("/api/v1/reports", params={"limit": 1})
        assert [r["id"] for r in response.json()["reports"]] == ["-Nrecent"]

    def test_list_reports_invalid_filter(self):
        response = self.client.get("/api/v1/reports", params={"time_filter": "month"})
        assert response.status_code == 400

    def test_store_failure_maps_to_bad_gateway(self):
        self.database.get.side_effect = DocumentStoreError("GET crimes failed with HTTP 503", status_code=503)

        response = self.client.get("/api/v1/reports")
        assert response.status_code == 502

    def test_report_detail_with_reporter(self):
        response = self.client.get("/api/v1/reports/-Nrecent")

        assert response.status_code == 200
        data = response.json()
        assert data["crime_type"] == "theft"
        assert data["latitude"] == 21.1702
        assert data["reporter"]["email"] == "asha@example.com"

    def test_report_not_found(self):
        assert self.client.get("/api/v1/reports/-Nmissing").status_code == 404

    def test_report_stats(self):
        response = self.client.get("/api/v1/reports/stats/summary")

        assert response.status_code == 200
        assert response.json()["total_reports"] == 3

    def test_create_report(self):
        response = self.client.post("/api/v1/reports", json={
            "full_name": "Asha Verma",
            "phone_number": "9876543210",
            "email": "asha@example.com",
            "crime_type": "theft",
            "date": "2026-10-19",
            "time": "10:15",
            "location": "Central Market, Surat",
            "description": "A man grabbed my bag and ran away near the market",
            "agreed_to_terms": True,
            "latitude": 21.17,
            "longitude": 72.83,
        })

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == "-Nnew"
        assert data["latitude"] == 21.17
        self.database.push.assert_called_once()

    def test_create_report_with_photos(self):
        self.handler.media_client = MagicMock()
        self.handler.media_client.upload.return_value = "https://res.cloudinary.com/demo/image/upload/bag.jpg"

        response = self.client.post(
            "/api/v1/reports/with-photos",
            data={
                "full_name": "Asha Verma",
                "phone_number": "9876543210",
                "email": "asha@example.com",
                "crime_type": "theft",
                "date": "2026-10-19",
                "time": "10:15",
                "location": "Central Market, Surat",
                "description": "A man grabbed my bag and ran away near the market",
                "agreed_to_terms": "true",
            },
            files=[("photos", ("bag.jpg", b"\xff\xd8\xff", "image/jpeg"))],
        )

        assert response.status_code == 201
        assert response.json()["image_urls"] == ["https://res.cloudinary.com/demo/image/upload/bag.jpg"]
        self.handler.media_client.upload.assert_called_once_with(b"\xff\xd8\xff", "bag.jpg", "image/jpeg")
        assert self.database.push.call_args[0][1]["imageUrls"] == response.json()["image_urls"]

    def test_photos_without_media_upload(self):
        response = self.client.post(
            "/api/v1/reports/with-photos",
            data={"full_name": "Asha Verma"},
            files=[("photos", ("bag.jpg", b"\xff\xd8\xff", "image/jpeg"))],
        )

        assert response.status_code == 400
        self.database.push.assert_not_called()

    def test_create_invalid_report(self):
        response = self.client.post("/api/v1/reports", json={"full_name": "Asha Verma"})

        assert response.status_code == 400
        assert "Phone Number must be 10 digits." in response.json()["detail"]
        self.database.push.assert_not_called()

    def test_user_reports(self):
        response = self.client.get("/api/v1/users/uid-citizen/reports")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()["reports"]] == ["-Nrecent"]

    def test_sign_up(self):
        self.handler.identity_client.sign_up.return_value = AuthSession(
            "uid-new", "new@example.com", "tok", "ref"
        )

        response = self.client.post("/api/v1/auth/signup", json={
            "full_name": "New Citizen",
            "email": "new@example.com",
            "password": "secret1",
        })

        assert response.status_code == 201
        assert response.json()["profile"]["usertype"] == "citizen"

    def test_sign_up_short_password(self):
        response = self.client.post("/api/v1/auth/signup", json={
            "full_name": "New Citizen",
            "email": "new@example.com",
            "password": "123",
        })
        assert response.status_code == 422

    def test_sign_up_existing_email(self):
        self.handler.identity_client.sign_up.side_effect = IdentityError(
            "rejected", code="EMAIL_EXISTS", status_code=400
        )

        response = self.client.post("/api/v1/auth/signup", json={
            "full_name": "New Citizen",
            "email": "asha@example.com",
            "password": "secret1",
        })

        assert response.status_code == 400
        assert response.json()["detail"] == "EMAIL_EXISTS"

    def test_sign_in(self):
        identity = MagicMock()
        identity.__enter__.return_value = identity
        identity.sign_in.return_value = AuthSession("uid-citizen", "asha@example.com", "tok")

        with patch("src.api.main.get_identity_client", return_value=identity):
            response = self.client.post("/api/v1/auth/signin", json={
                "email": "asha@example.com", "password": "secret1"
            })

        assert response.status_code == 200
        assert response.json()["uid"] == "uid-citizen"

    def test_geocode_search(self):
        geocoder = MagicMock()
        geocoder.__enter__.return_value = geocoder
        geocoder.search.return_value = []

        with patch("src.api.main.GeocodingClient", return_value=geocoder):
            response = self.client.get("/api/v1/geocode/search", params={"q": "Surat"})

        assert response.status_code == 200
        assert response.json() == {"count": 0, "places": []}
        geocoder.search.assert_called_once_with("Surat")

    def test_geocode_reverse_out_of_range(self):
        response = self.client.get("/api/v1/geocode/reverse", params={"latitude": 91, "longitude": 0})
        assert response.status_code == 422
