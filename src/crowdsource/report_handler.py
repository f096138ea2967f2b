"""
Crime report handler for crowdsourced data
Reads, filters and stores citizen reports in the realtime database
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from src.core.constants import (
    CRIMES_COLLECTION,
    REPORT_TIME_FILTERS,
    USER_TYPES,
    USERS_COLLECTION,
)
from src.database.connection import RealtimeDatabase
from src.database.models import CrimeReport, UserProfile
from src.crowdsource.validation import ReportSubmission, ReportValidator, ReportValidationError

logger = logging.getLogger(__name__)

# (filename, bytes, content type)
Attachment = Tuple[str, bytes, str]


class ReportHandler:
    """
    Handles crime reports from citizens.

    Storage, media upload and identity are external collaborators; this
    class only shapes records and applies the dashboard filters.
    """

    def __init__(
        self,
        database: RealtimeDatabase,
        media_client: Optional[Any] = None,
        identity_client: Optional[Any] = None,
        validator: Optional[ReportValidator] = None
    ):
        """
        Initialize report handler.

        Args:
            database: Realtime database holding `crimes` and `users`
            media_client: Uploader for report attachments
            identity_client: Identity service for registrations
            validator: Submission validator
        """
        self.database = database
        self.media_client = media_client
        self.identity_client = identity_client
        self.validator = validator or ReportValidator()

        logger.info("ReportHandler initialized")

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _load_reports(self) -> List[CrimeReport]:
        data = self.database.get(CRIMES_COLLECTION) or {}
        if isinstance(data, list):
            # Sequential integer keys come back as a JSON array
            data = {str(i): record for i, record in enumerate(data) if record is not None}
        elif not isinstance(data, dict):
            logger.warning(f"Unexpected {CRIMES_COLLECTION} payload: {type(data).__name__}")
            return []
        reports = []
        for report_id, record in data.items():
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed report record: {report_id}")
                continue
            reports.append(CrimeReport.from_record(report_id, record))
        return reports

    def list_reports(
        self,
        time_filter: str = "all",
        now: Optional[datetime] = None
    ) -> List[CrimeReport]:
        """
        List reports, newest first.

        Args:
            time_filter: "all", "1h", "24h" or "week"
            now: Reference time (defaults to the current UTC time)

        Returns:
            Reports submitted inside the window
        """
        if time_filter != "all" and time_filter not in REPORT_TIME_FILTERS:
            raise ValueError(f"Invalid time filter: {time_filter}")

        reports = self._load_reports()

        if time_filter != "all":
            now = now or datetime.now(timezone.utc)
            threshold = now - timedelta(seconds=REPORT_TIME_FILTERS[time_filter])
            reports = [r for r in reports if r.timestamp and r.timestamp >= threshold]

        return sorted(
            reports,
            key=lambda r: r.timestamp or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )

    def list_reports_for_user(self, user_id: str) -> List[CrimeReport]:
        """Reports filed by one user."""
        return [r for r in self.list_reports() if r.user_id == user_id]

    def get_report(self, report_id: str) -> Optional[CrimeReport]:
        """Get report by ID."""
        record = self.database.get(f"{CRIMES_COLLECTION}/{report_id}")
        if not isinstance(record, dict):
            return None
        return CrimeReport.from_record(report_id, record)

    def get_user(self, uid: str) -> Optional[UserProfile]:
        record = self.database.get(f"{USERS_COLLECTION}/{uid}")
        if not isinstance(record, dict):
            return None
        return UserProfile.from_record(uid, record)

    def get_reporter(self, report: CrimeReport) -> Optional[UserProfile]:
        """Profile of the user who filed a report, if known."""
        if not report.user_id:
            return None
        return self.get_user(report.user_id)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def submit_report(
        self,
        submission: ReportSubmission,
        attachments: Optional[Sequence[Attachment]] = None
    ) -> CrimeReport:
        """
        Validate, upload attachments and store a new report.

        Returns:
            Created CrimeReport

        Raises:
            ReportValidationError: if the submission is invalid
        """
        errors = self.validator.validate(submission)
        if errors:
            raise ReportValidationError(errors)

        image_urls = []
        if attachments:
            if self.media_client is None:
                raise ReportValidationError(["Attachments are not accepted: media upload is not configured."])
            for filename, data, content_type in attachments:
                image_urls.append(self.media_client.upload(data, filename, content_type))

        report = CrimeReport(
            id="",
            description=submission.description.strip(),
            crime_type=submission.crime_type,
            location=submission.location.strip(),
            full_name=submission.full_name.strip(),
            phone_number=submission.phone_number,
            email=submission.email,
            user_id=submission.user_id,
            date=submission.date,
            time=submission.time,
            image_urls=image_urls,
            coordinates=submission.coordinates,
            timestamp=datetime.now(timezone.utc),
        )

        report.id = self.database.push(CRIMES_COLLECTION, report.to_record())
        logger.info(f"New report created: {report.id} ({report.crime_type})")

        return report

    def register_user(
        self,
        full_name: str,
        email: str,
        password: str,
        usertype: str = "citizen",
        phone: Optional[str] = None,
        badge: Optional[str] = None
    ):
        """
        Create an identity and its `users/{uid}` profile.

        Returns:
            (AuthSession, UserProfile)
        """
        if self.identity_client is None:
            raise RuntimeError("Identity service is not configured")
        if usertype not in USER_TYPES:
            raise ValueError(f"Invalid user type: {usertype}")

        session = self.identity_client.sign_up(email, password)
        profile = UserProfile(
            uid=session.uid,
            full_name=full_name,
            email=email,
            usertype=usertype,
            created_at=datetime.now(timezone.utc),
            phone=phone,
            badge=badge,
        )
        self.database.set(f"{USERS_COLLECTION}/{session.uid}", profile.to_record())

        return session, profile

    def get_statistics(self) -> Dict[str, Any]:
        """Get report statistics."""
        reports = self._load_reports()

        by_type: Dict[str, int] = {}
        with_photo = 0
        with_coordinates = 0

        for report in reports:
            crime_type = report.crime_type or "unspecified"
            by_type[crime_type] = by_type.get(crime_type, 0) + 1
            if report.image_urls:
                with_photo += 1
            if report.coordinates:
                with_coordinates += 1

        return {
            "total_reports": len(reports),
            "by_crime_type": by_type,
            "with_photo": with_photo,
            "with_coordinates": with_coordinates,
        }
