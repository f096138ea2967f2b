"""
CrimeWatch Triage - REST API

FastAPI application providing endpoints for crime reports, AI-assisted
triage, geocoding and account management.

Run with: uvicorn src.api.main:app --reload
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.core.config import settings
from src.core.constants import REPORT_TIME_FILTERS
from src.core.errors import CollaboratorError, IdentityError
from src.core.logging import setup_logging, get_logger
from src.crowdsource.report_handler import ReportHandler
from src.crowdsource.validation import ReportSubmission, ReportValidationError
from src.database.connection import RealtimeDatabase
from src.integrations.geocoding_client import GeocodingClient
from src.integrations.identity_client import IdentityClient
from src.integrations.media_client import MediaUploadClient
from src.triage.aspects import default_registry
from src.triage.classifier_client import ClassifierClient, create_classifier_client
from src.triage.errors import InvalidInputError
from src.triage.orchestrator import TriageOrchestrator
from src.triage.presenter import ResultPresenter
from src.triage.session import TriageSession

VERSION = "0.1.0"

logger = get_logger(__name__)


# Global instances for stateful services
_classifier: Optional[ClassifierClient] = None
_orchestrator: Optional[TriageOrchestrator] = None
_report_handler: Optional[ReportHandler] = None
_sessions: Dict[str, TriageSession] = {}
_presenter = ResultPresenter()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"CrimeWatch Triage API {VERSION} starting ({settings.app_env})")
    yield
    if _classifier is not None:
        await _classifier.aclose()


# FastAPI app
app = FastAPI(
    title="CrimeWatch Triage",
    description="Citizen crime reporting API with AI-assisted triage for law enforcement",
    version=VERSION,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    modules: dict


class AspectResponse(BaseModel):
    """Registered triage aspect."""
    aspect_id: str
    display_name: str
    candidate_labels: List[str]


class TriageRequest(BaseModel):
    """Ad-hoc triage of a description."""
    description: str = Field(..., min_length=1)
    report_id: str = "adhoc"


class ChartPoint(BaseModel):
    name: str
    value: float


class AspectSummary(BaseModel):
    aspect_id: str
    display_name: str
    top_label: str
    top_score: float
    available: bool


class TriageResponse(BaseModel):
    """Triage result rendered for dashboards."""
    report_id: str
    computed_at: str
    degraded: bool
    failed_aspects: List[str]
    aspects: List[AspectSummary]
    charts: Dict[str, List[ChartPoint]]
    severity_distribution: List[ChartPoint]
    summary: str


class ReportCreateRequest(BaseModel):
    """Request to create a crime report."""
    full_name: str = ""
    phone_number: str = ""
    email: str = ""
    crime_type: str = ""
    date: str = ""
    time: str = ""
    location: str = ""
    description: str = ""
    agreed_to_terms: bool = False
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    user_id: Optional[str] = None


class ReportResponse(BaseModel):
    """Crime report response."""
    id: str
    crime_type: str
    description: str
    location: str
    date: Optional[str]
    time: Optional[str]
    image_urls: List[str]
    latitude: Optional[float]
    longitude: Optional[float]
    reporter_name: Optional[str]
    user_id: Optional[str]
    timestamp: Optional[str]


class ReportDetailResponse(ReportResponse):
    """Crime report with reporter profile."""
    reporter: Optional[Dict[str, Any]] = None


class ReportListResponse(BaseModel):
    """List of crime reports."""
    count: int
    time_filter: str
    reports: List[ReportResponse]


class ReportStatsResponse(BaseModel):
    """Report statistics."""
    total_reports: int
    by_crime_type: dict
    with_photo: int
    with_coordinates: int


class SignUpRequest(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: str
    password: str = Field(..., min_length=6)
    usertype: str = Field(default="citizen", pattern="^(citizen|law)$")
    phone: Optional[str] = None
    badge: Optional[str] = None


class SignInRequest(BaseModel):
    email: str
    password: str


class PasswordResetRequest(BaseModel):
    email: str


# ============================================================================
# Helper Functions
# ============================================================================

def get_report_handler() -> ReportHandler:
    """Get report handler bound to the realtime database."""
    global _report_handler
    if _report_handler is None:
        if not settings.firebase_database_url:
            raise HTTPException(
                status_code=500,
                detail="FIREBASE_DATABASE_URL not configured. Set environment variable."
            )
        media = MediaUploadClient() if settings.cloudinary_cloud_name else None
        identity = IdentityClient() if settings.firebase_api_key else None
        _report_handler = ReportHandler(RealtimeDatabase(), media, identity)
    return _report_handler


def get_orchestrator() -> TriageOrchestrator:
    """Get triage orchestrator for the configured classifier backend."""
    global _classifier, _orchestrator
    if _orchestrator is None:
        _classifier = create_classifier_client()
        _orchestrator = TriageOrchestrator(_classifier, default_registry)
    return _orchestrator


def get_session(report_id: str) -> TriageSession:
    """One session per report, so a re-analysis supersedes the previous one."""
    session = _sessions.get(report_id)
    if session is None:
        session = TriageSession(get_orchestrator())
        _sessions[report_id] = session
    return session


def release_session(report_id: str, session: TriageSession) -> None:
    """Forget a session once no analysis of the report is in flight."""
    if not session.busy and _sessions.get(report_id) is session:
        del _sessions[report_id]


def get_identity_client() -> IdentityClient:
    if not settings.firebase_api_key:
        raise HTTPException(status_code=500, detail="FIREBASE_API_KEY not configured.")
    return IdentityClient()


def collaborator_error(e: CollaboratorError) -> HTTPException:
    if isinstance(e, IdentityError) and e.status_code == 400:
        return HTTPException(status_code=400, detail=e.code or str(e))
    return HTTPException(status_code=502, detail=str(e))


def report_response(report, reporter=None, detail: bool = False):
    data = report.to_dict()
    if detail:
        return ReportDetailResponse(**data, reporter=reporter.to_dict() if reporter else None)
    return ReportResponse(**data)


# ============================================================================
# System Routes
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health status and module configuration."""
    modules = {
        "classifier": settings.classifier_backend,
        "database": bool(settings.firebase_database_url),
        "identity": bool(settings.firebase_api_key),
        "media_upload": bool(settings.cloudinary_cloud_name),
        "geocoding": True,
    }

    return HealthResponse(
        status="healthy",
        version=VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        modules=modules,
    )


# ============================================================================
# Triage Routes
# ============================================================================

@app.get("/api/v1/aspects", response_model=List[AspectResponse], tags=["Triage"])
async def list_aspects():
    """List the triage aspects in presentation order."""
    return [
        AspectResponse(
            aspect_id=a.aspect_id,
            display_name=a.display_name,
            candidate_labels=list(a.candidate_labels),
        )
        for a in default_registry.list_aspects()
    ]


@app.post("/api/v1/triage", response_model=TriageResponse, tags=["Triage"])
async def triage_description(request: TriageRequest):
    """Triage a free-text description without a stored report."""
    try:
        result = await get_orchestrator().analyze(request.report_id, request.description)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _presenter.to_report(result)


@app.post("/api/v1/reports/{report_id}/analyze", response_model=TriageResponse, tags=["Triage"])
async def analyze_report(report_id: str):
    """
    Run AI triage on a stored report.

    A newer analysis of the same report supersedes this one; the superseded
    request answers 409.
    """
    handler = get_report_handler()
    try:
        report = await run_in_threadpool(handler.get_report, report_id)
    except CollaboratorError as e:
        raise collaborator_error(e)

    if not report:
        raise HTTPException(status_code=404, detail="Report not found")

    session = get_session(report_id)
    try:
        result = await session.analyze(report_id, report.description)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    finally:
        release_session(report_id, session)

    if result is None:
        raise HTTPException(status_code=409, detail="Analysis superseded by a newer request")

    return _presenter.to_report(result)


# ============================================================================
# Report Routes
# ============================================================================

@app.get("/api/v1/reports", response_model=ReportListResponse, tags=["Reports"])
def list_reports(
    time_filter: str = Query(default="all", description="all, 1h, 24h or week"),
    limit: int = Query(default=50, ge=1, le=200),
):
    """List crime reports, newest first, optionally within a time window."""
    if time_filter != "all" and time_filter not in REPORT_TIME_FILTERS:
        raise HTTPException(status_code=400, detail=f"Invalid time filter: {time_filter}")

    try:
        reports = get_report_handler().list_reports(time_filter)[:limit]
    except CollaboratorError as e:
        raise collaborator_error(e)

    return ReportListResponse(
        count=len(reports),
        time_filter=time_filter,
        reports=[report_response(r) for r in reports],
    )


@app.get("/api/v1/reports/stats/summary", response_model=ReportStatsResponse, tags=["Reports"])
def get_report_stats():
    """Get statistics for all crime reports."""
    try:
        return ReportStatsResponse(**get_report_handler().get_statistics())
    except CollaboratorError as e:
        raise collaborator_error(e)


@app.get("/api/v1/reports/{report_id}", response_model=ReportDetailResponse, tags=["Reports"])
def get_report(report_id: str):
    """Get a crime report with its reporter profile."""
    handler = get_report_handler()
    try:
        report = handler.get_report(report_id)
        if not report:
            raise HTTPException(status_code=404, detail="Report not found")
        reporter = handler.get_reporter(report)
    except CollaboratorError as e:
        raise collaborator_error(e)

    return report_response(report, reporter, detail=True)


def submit_report_response(submission: ReportSubmission, attachments=None) -> ReportResponse:
    try:
        report = get_report_handler().submit_report(submission, attachments)
    except ReportValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)
    except CollaboratorError as e:
        raise collaborator_error(e)

    return report_response(report)


@app.post("/api/v1/reports", response_model=ReportResponse, status_code=201, tags=["Reports"])
def create_report(request: ReportCreateRequest):
    """Submit a new crime report."""
    coordinates = None
    if request.latitude is not None and request.longitude is not None:
        coordinates = (request.latitude, request.longitude)

    submission = ReportSubmission(
        full_name=request.full_name,
        phone_number=request.phone_number,
        email=request.email,
        crime_type=request.crime_type,
        date=request.date,
        time=request.time,
        location=request.location,
        description=request.description,
        agreed_to_terms=request.agreed_to_terms,
        coordinates=coordinates,
        user_id=request.user_id,
    )

    return submit_report_response(submission)


@app.post("/api/v1/reports/with-photos", response_model=ReportResponse, status_code=201, tags=["Reports"])
async def create_report_with_photos(
    full_name: str = Form(""),
    phone_number: str = Form(""),
    email: str = Form(""),
    crime_type: str = Form(""),
    date: str = Form(""),
    time: str = Form(""),
    location: str = Form(""),
    description: str = Form(""),
    agreed_to_terms: bool = Form(False),
    latitude: Optional[float] = Form(None, ge=-90, le=90),
    longitude: Optional[float] = Form(None, ge=-180, le=180),
    user_id: Optional[str] = Form(None),
    photos: List[UploadFile] = File(...),
):
    """
    Submit a crime report with photo evidence.

    Photos are uploaded to the media store and their URLs saved on the report.
    """
    attachments = []
    for photo in photos:
        attachments.append((
            photo.filename or "upload",
            await photo.read(),
            photo.content_type or "application/octet-stream",
        ))

    coordinates = None
    if latitude is not None and longitude is not None:
        coordinates = (latitude, longitude)

    submission = ReportSubmission(
        full_name=full_name,
        phone_number=phone_number,
        email=email,
        crime_type=crime_type,
        date=date,
        time=time,
        location=location,
        description=description,
        agreed_to_terms=agreed_to_terms,
        coordinates=coordinates,
        user_id=user_id,
    )

    return await run_in_threadpool(submit_report_response, submission, attachments)


@app.get("/api/v1/users/{uid}/reports", response_model=ReportListResponse, tags=["Reports"])
def list_user_reports(uid: str):
    """List the reports filed by one user."""
    try:
        reports = get_report_handler().list_reports_for_user(uid)
    except CollaboratorError as e:
        raise collaborator_error(e)

    return ReportListResponse(
        count=len(reports),
        time_filter="all",
        reports=[report_response(r) for r in reports],
    )


# ============================================================================
# Geocoding Routes
# ============================================================================

@app.get("/api/v1/geocode/search", tags=["Geocoding"])
def geocode_search(q: str = Query(..., description="Free-text location")):
    """Location suggestions for a free-text query."""
    try:
        with GeocodingClient() as client:
            places = client.search(q)
    except CollaboratorError as e:
        raise collaborator_error(e)

    return {"count": len(places), "places": [p.to_dict() for p in places]}


@app.get("/api/v1/geocode/reverse", tags=["Geocoding"])
def geocode_reverse(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
):
    """Address for a coordinate pair."""
    try:
        with GeocodingClient() as client:
            address = client.reverse(latitude, longitude)
    except CollaboratorError as e:
        raise collaborator_error(e)

    return {"latitude": latitude, "longitude": longitude, "address": address}


# ============================================================================
# Account Routes
# ============================================================================

@app.post("/api/v1/auth/signup", status_code=201, tags=["Accounts"])
def sign_up(request: SignUpRequest):
    """Register a citizen or law-enforcement account."""
    try:
        session, profile = get_report_handler().register_user(
            full_name=request.full_name,
            email=request.email,
            password=request.password,
            usertype=request.usertype,
            phone=request.phone,
            badge=request.badge,
        )
    except RuntimeError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except CollaboratorError as e:
        raise collaborator_error(e)

    return {"session": session.to_dict(), "profile": profile.to_dict()}


@app.post("/api/v1/auth/signin", tags=["Accounts"])
def sign_in(request: SignInRequest):
    """Sign in with email and password."""
    try:
        with get_identity_client() as client:
            session = client.sign_in(request.email, request.password)
    except CollaboratorError as e:
        raise collaborator_error(e)

    return session.to_dict()


@app.post("/api/v1/auth/password-reset", status_code=202, tags=["Accounts"])
def password_reset(request: PasswordResetRequest):
    """Email a password reset link."""
    try:
        with get_identity_client() as client:
            client.send_password_reset(request.email)
    except CollaboratorError as e:
        raise collaborator_error(e)

    return {"status": "sent"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        workers=1 if settings.is_development else settings.api_workers,
    )
