"""Issue request schemas and triage filter object."""

import json
from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from civic_reporter.models.issue import ISSUE_CATEGORIES, DEFAULT_ADDRESS
from civic_reporter.utils.exceptions import ValidationError


class LocationIn(BaseModel):
    latitude: float = Field(allow_inf_nan=False)
    longitude: float = Field(allow_inf_nan=False)
    address: str | None = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _reject_non_numeric(cls, value: Any) -> Any:
        # bool is an int subclass; "true" must not become 1.0
        if isinstance(value, bool) or value is None or value == "":
            raise ValueError("Location coordinates are required")
        return value

    @field_validator("address")
    @classmethod
    def _default_address(cls, value: str | None) -> str:
        value = (value or "").strip()
        return value or DEFAULT_ADDRESS


class IssueCreate(BaseModel):
    """Validated issue report. Built inside the lifecycle engine, not by FastAPI,
    so that a rejected report can still trigger photo compensation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    category: str
    location: LocationIn

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str) -> str:
        if value not in ISSUE_CATEGORIES:
            raise ValueError(f"Category must be one of: {', '.join(ISSUE_CATEGORIES)}")
        return value


class StatusUpdate(BaseModel):
    status: str | None = None  # Pending, In-Progress, Resolved


class NotesUpdate(BaseModel):
    notes: str | None = None


class IssueFilters(BaseModel):
    """Triage list options. Every option is optional; present ones are ANDed.

    Attributes:
        status: Exact status match
        category: Exact category match
        search: Case-insensitive substring of title OR description
        start_date: Inclusive lower bound on created_at
        end_date: Inclusive upper bound on created_at
    """

    status: str | None = None
    category: str | None = None
    search: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    @classmethod
    def from_query(
        cls,
        status: str | None = None,
        category: str | None = None,
        search: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> "IssueFilters":
        """Build filters from raw query-string values. Blank values are ignored."""
        return cls(
            status=status or None,
            category=category or None,
            search=search or None,
            start_date=parse_date_bound(start_date, "startDate", end_of_day=False),
            end_date=parse_date_bound(end_date, "endDate", end_of_day=True),
        )


def parse_date_bound(value: str | None, name: str, end_of_day: bool) -> datetime | None:
    """Parse an ISO date or datetime into an aware UTC datetime.

    A date-only ``end_of_day`` bound covers the whole day.

    Raises:
        ValidationError: The value is not ISO 8601
    """
    if not value:
        return None
    value = value.strip()
    try:
        if len(value) == 10:
            day: date = date.fromisoformat(value)
            bound = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            bound = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid {name}: expected an ISO 8601 date")
    if bound.tzinfo is None:
        bound = bound.replace(tzinfo=timezone.utc)
    return bound.astimezone(timezone.utc)


def parse_location(raw: Any) -> Any:
    """Multipart forms carry the location as a JSON string."""
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError("Location must be a JSON object with latitude and longitude")
    return raw


def validation_message(exc: PydanticValidationError) -> str:
    """Human-readable message for the first pydantic error."""
    err = exc.errors()[0]
    field = ".".join(str(part) for part in err.get("loc", ()) if part != "__root__")
    message = err.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{field}: {message}" if field else message
