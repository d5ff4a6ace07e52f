# models.py
from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def name_key(name: str) -> str:
    """Case/whitespace-insensitive key used to dedupe raw extracted names."""
    return " ".join((name or "").split()).casefold()


# ─────────────────────────────────────────────────────────────────────────────
# ERRORS
# ─────────────────────────────────────────────────────────────────────────────


class TicketIntelError(Exception):
    """Base class for every error raised by ticketintel."""


class RosterStoreError(TicketIntelError):
    """The roster store could not be read or written."""


class RosterStoreUnavailable(RosterStoreError):
    """Transient store failure; the write is retried."""


class AIResponseDecodeError(TicketIntelError):
    """The AI extractor's reply is not decodable JSON."""


class UnusableTicketError(TicketIntelError):
    """No extracted flight carries a flight number or a passenger name."""

    def __init__(self, message: str, issues: Optional[List[str]] = None):
        super().__init__(message)
        self.issues = list(issues or [])


# ─────────────────────────────────────────────────────────────────────────────
# EXTRACTION
# ─────────────────────────────────────────────────────────────────────────────


class FieldSource(str, Enum):
    AIRLINE_SPECIFIC = "airline_specific"
    GENERIC = "generic"
    AI = "ai"


class FieldCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    confidence: float = Field(..., ge=0, le=1)
    source: FieldSource


class RawTicketText(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ExtractedFlight(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    flight_number: Optional[str] = None
    airline: Optional[str] = None
    from_airport: Optional[str] = Field(default=None, alias="from")
    to_airport: Optional[str] = Field(default=None, alias="to")
    date: Optional[str] = None
    departure_date: Optional[str] = None
    arrival_date: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    departure_datetime: Optional[datetime] = None
    arrival_datetime: Optional[datetime] = None
    passenger_name: Optional[str] = None
    all_passenger_names: List[str] = Field(default_factory=list)
    seat_numbers: List[str] = Field(default_factory=list)
    confirmation_code: Optional[str] = None
    confidence: Dict[str, float] = Field(default_factory=dict)
    overall_confidence: float = Field(default=0.0, ge=0, le=1)
    parse_strategy: str = "generic"
    detected_airline: Optional[str] = None
    all_matches: Dict[str, List[FieldCandidate]] = Field(default_factory=dict)

    @field_validator("flight_number")
    @classmethod
    def _clean_flight_no(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return re.sub(r"[^\w\d]", "", v.upper()) or None

    @field_validator("from_airport", "to_airport")
    @classmethod
    def _upper_airport(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return v.strip().upper()

    @property
    def present_fields(self) -> List[str]:
        return [k for k, v in self.confidence.items() if v > 0]


class MultiFlightExtraction(BaseModel):
    model_config = ConfigDict(frozen=True)

    multiple_flights: bool = True
    flights: List[ExtractedFlight]


# ─────────────────────────────────────────────────────────────────────────────
# NAMES & PASSENGERS
# ─────────────────────────────────────────────────────────────────────────────


class NameComponents(BaseModel):
    model_config = ConfigDict(frozen=True)

    parts: List[str] = Field(default_factory=list)
    first: str = ""
    last: str = ""
    middle: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.parts


class Passenger(BaseModel):
    """
    A roster identity. Field aliases follow the roster store's camelCase
    documents; unknown store columns (phone, chat ids...) are carried through.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    legal_name: Optional[str] = Field(default=None, alias="legalName")
    extracted_names: List[str] = Field(default_factory=list, alias="extractedNames")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")
    created_by: Optional[str] = Field(default=None, alias="createdBy")

    @field_validator("extracted_names", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    def has_extracted_name(self, extracted: str) -> bool:
        key = name_key(extracted)
        return any(name_key(existing) == key for existing in self.extracted_names)

    def add_extracted_name(self, extracted: str, *, now: Optional[datetime] = None) -> bool:
        """Record a raw extraction; returns False when it is already known."""
        extracted = (extracted or "").strip()
        if not extracted or self.has_extracted_name(extracted):
            return False
        self.extracted_names.append(extracted)
        self.updated_at = now or utcnow()
        return True


class MatchType(str, Enum):
    LEGAL_EXACT = "legal_exact"
    DISPLAY_EXACT = "display_exact"
    NAME_ORDER_VARIATION = "name_order_variation"
    EXTRACTED_EXISTING = "extracted_existing"
    LEGAL_COMPONENT = "legal_component"
    DISPLAY_COMPONENT = "display_component"
    LEGAL_FUZZY = "legal_fuzzy"
    DISPLAY_FUZZY = "display_fuzzy"
    NO_MATCH = "no_match"


class MatchResult(BaseModel):
    passenger: Optional[Passenger] = None
    match_type: MatchType
    confidence: float = Field(..., ge=0, le=1)
    extracted_name: str

    @model_validator(mode="after")
    def _check_invariant(self) -> "MatchResult":
        no_match = self.match_type == MatchType.NO_MATCH
        if no_match != (self.passenger is None):
            raise ValueError("passenger must be None exactly when match_type is no_match")
        if no_match != (self.confidence == 0):
            raise ValueError("confidence must be 0 exactly when match_type is no_match")
        return self

    @property
    def matched(self) -> bool:
        return self.passenger is not None

    @classmethod
    def no_match(cls, extracted_name: str) -> "MatchResult":
        return cls(passenger=None, match_type=MatchType.NO_MATCH, confidence=0.0, extracted_name=extracted_name)


class ResolvedPassenger(BaseModel):
    passenger: Passenger
    created: bool
    match: MatchResult


# ─────────────────────────────────────────────────────────────────────────────
# PROCESSING RESULTS
# ─────────────────────────────────────────────────────────────────────────────


class PassengerLink(BaseModel):
    passenger_id: str
    name: str
    extracted_name: str
    match_type: str
    match_confidence: float = Field(..., ge=0, le=1)


class FlightRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    flight_number: Optional[str] = None
    airline: Optional[str] = None
    from_airport: Optional[str] = None
    to_airport: Optional[str] = None
    departure_datetime: Optional[datetime] = None
    arrival_datetime: Optional[datetime] = None
    passengers: List[PassengerLink] = Field(default_factory=list)
    extracted_passenger_names: List[str] = Field(default_factory=list)
    seat_numbers: List[str] = Field(default_factory=list)
    confirmation_code: Optional[str] = None
    parse_strategy: str
    overall_confidence: float = 0.0
    processing_status: str
    extracted_data: ExtractedFlight
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    created_by: str


class TicketProcessingResult(BaseModel):
    success: bool = True
    flights: List[FlightRecord] = Field(default_factory=list)
    resolutions: List[ResolvedPassenger] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
