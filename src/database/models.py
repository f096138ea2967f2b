"""
Document models for CrimeWatch Triage
Records stored under the `users` and `crimes` collections
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp.

    Records carry either epoch milliseconds or an ISO-8601 string.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def _parse_coordinates(value: Any) -> Optional[Tuple[float, float]]:
    if not isinstance(value, dict):
        return None
    try:
        return float(value["lat"]), float(value["lon"])
    except (KeyError, TypeError, ValueError):
        return None


@dataclass
class CrimeReport:
    """
    Crime report submitted by a citizen.

    Read from `crimes/{id}`; `description` is the triage input.
    """
    id: str
    description: str = ""
    crime_type: str = ""
    location: str = ""

    # Reporter
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    user_id: Optional[str] = None

    # Incident time as entered by the reporter
    date: Optional[str] = None
    time: Optional[str] = None

    # Media and position
    image_urls: List[str] = field(default_factory=list)
    coordinates: Optional[Tuple[float, float]] = None

    # Submission time
    timestamp: Optional[datetime] = None

    @classmethod
    def from_record(cls, report_id: str, record: Dict[str, Any]) -> "CrimeReport":
        """Build a report from a stored record."""
        image_urls = list(record.get("imageUrls") or [])
        if record.get("imageUrl"):
            image_urls.insert(0, record["imageUrl"])

        return cls(
            id=report_id,
            description=record.get("description") or "",
            crime_type=record.get("crimeType") or record.get("type") or "",
            location=record.get("location") or "",
            full_name=record.get("fullName"),
            phone_number=record.get("phoneNumber"),
            email=record.get("email"),
            user_id=record.get("userId"),
            date=record.get("date"),
            time=record.get("time"),
            image_urls=image_urls,
            coordinates=_parse_coordinates(record.get("coordinates")),
            timestamp=parse_timestamp(record.get("timestamp")),
        )

    def to_record(self) -> Dict[str, Any]:
        """Convert to the stored record shape."""
        record = {
            "fullName": self.full_name,
            "phoneNumber": self.phone_number,
            "email": self.email,
            "crimeType": self.crime_type,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "description": self.description,
            "imageUrls": self.image_urls,
            "coordinates": (
                {"lat": str(self.coordinates[0]), "lon": str(self.coordinates[1])}
                if self.coordinates else None
            ),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
        if self.user_id:
            record["userId"] = self.user_id
        return record

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "crime_type": self.crime_type,
            "description": self.description,
            "location": self.location,
            "date": self.date,
            "time": self.time,
            "image_urls": self.image_urls,
            "latitude": self.coordinates[0] if self.coordinates else None,
            "longitude": self.coordinates[1] if self.coordinates else None,
            "reporter_name": self.full_name,
            "user_id": self.user_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass
class UserProfile:
    """Profile stored under `users/{uid}`."""
    uid: str
    full_name: str
    email: str
    usertype: str = "citizen"
    created_at: Optional[datetime] = None
    phone: Optional[str] = None
    badge: Optional[str] = None

    @property
    def is_law_enforcement(self) -> bool:
        return self.usertype == "law"

    @property
    def initial(self) -> str:
        name = (self.full_name or self.email or "Anon").strip()
        return name[:1].upper() or "A"

    @classmethod
    def from_record(cls, uid: str, record: Dict[str, Any]) -> "UserProfile":
        return cls(
            uid=uid,
            full_name=record.get("fullName") or record.get("name") or "",
            email=record.get("email") or "",
            usertype=record.get("usertype") or "citizen",
            created_at=parse_timestamp(record.get("createdAt")),
            phone=record.get("phone"),
            badge=record.get("badge"),
        )

    def to_record(self) -> Dict[str, Any]:
        record = {
            "fullName": self.full_name,
            "email": self.email,
            "usertype": self.usertype,
            "createdAt": (self.created_at or datetime.now(timezone.utc)).isoformat(),
        }
        if self.phone:
            record["phone"] = self.phone
        if self.badge:
            record["badge"] = self.badge
        return record

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "full_name": self.full_name,
            "email": self.email,
            "usertype": self.usertype,
            "phone": self.phone,
            "badge": self.badge,
        }
