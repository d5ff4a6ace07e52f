# ai_normalizer.py
"""
AI-Output Normalizer.

The vision model returns either a single flight record or {"flights": [...]},
camelCase keys, and the literal string "missing" for anything it could not
read. Everything here maps that onto ExtractedFlight, with absolute
departure/arrival instants computed from the airport's civil timezone.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from . import config
from .airports import AirportLookup, default_airports, load_zone
from .logging_utils import log_event
from .models import (
    AIResponseDecodeError,
    ExtractedFlight,
    FieldCandidate,
    FieldSource,
    MultiFlightExtraction,
)

logger = logging.getLogger("ticketintel.ai_normalizer")

MISSING = "missing"

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_TIME_RE = re.compile(
    r"^\s*(\d{1,2})(?::(\d{2}))?(?::\d{2})?\s*(?:([AaPp])\.?\s*[Mm]\.?)?\s*$"
)
_MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]
_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%d %b %Y", "%b %d, %Y", "%b %d %Y", "%d%b%Y", "%d%b%y")


# ---------------- decoding ----------------


def decode_ai_response(text: str) -> Dict[str, Any]:
    """Model reply text -> dict; tolerates a Markdown code fence around the JSON."""
    if not text or not text.strip():
        raise AIResponseDecodeError("Empty AI response")
    cleaned = text.strip()
    fenced = _FENCE_RE.search(cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        log_event(logger, "ai_response_decode_failed", level=logging.ERROR, error=str(e), raw_length=len(text))
        raise AIResponseDecodeError(f"Invalid JSON in AI response: {e}") from e
    if not isinstance(data, dict):
        raise AIResponseDecodeError(f"AI response is a {type(data).__name__}, expected an object")
    return data


# ---------------- value cleanup ----------------


def present(value: Any) -> Optional[str]:
    """None for the "missing" sentinel, blanks and non-scalars; the stripped string otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    elif not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() == MISSING:
        return None
    return value


def present_list(values: Any) -> List[str]:
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)):
        return []
    out = []
    for v in values:
        p = present(v)
        if p is not None:
            out.append(p)
    return out


def infer_year(date_str: Optional[str], today: Optional[date] = None) -> Optional[str]:
    """
    Give a year to "MM/DD", "MM-DD" and "Mon DD" dates. Late in the year
    (November, December) an early-year flight (January to April) is assumed
    to be next year. ISO dates and anything unrecognised pass through.
    """
    if not date_str:
        return date_str
    s = date_str.strip()
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", s):
        return s

    m = re.fullmatch(r"(\d{1,2})[/-](\d{1,2})", s)
    if m:
        month, day = int(m.group(1)), int(m.group(2))
    else:
        m = re.fullmatch(r"([A-Za-z]{3})\s+(\d{1,2})", s)
        if not m or m.group(1).lower() not in _MONTHS:
            return s
        month, day = _MONTHS.index(m.group(1).lower()) + 1, int(m.group(2))

    today = today or date.today()
    year = today.year
    if today.month >= 11 and 1 <= month <= 4:
        year += 1
    inferred = f"{year}-{month:02d}-{day:02d}"
    logger.debug("Smart year inference: %r -> %r (reference %s)", s, inferred, today.isoformat())
    return inferred


def _clean_flight_number(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return re.sub(r"\s+", "", value.upper()) or None


# ---------------- timestamp synthesis ----------------


def parse_time(value: Optional[str]) -> Optional[time]:
    """Parse "8:30 AM", "20:15" or "12 PM"; None when unreadable."""
    if not value:
        return None
    m = _TIME_RE.match(value)
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2) or 0)
    meridiem = (m.group(3) or "").upper()
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        if meridiem == "P" and hour != 12:
            hour += 12
        elif meridiem == "A" and hour == 12:
            hour = 0
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    s = value.strip()
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def synthesize_timestamp(
    date_str: Optional[str],
    time_str: Optional[str],
    airport_code: Optional[str],
    airport_lookup: Optional[AirportLookup] = None,
) -> Optional[datetime]:
    """
    Local date + local time at an airport -> aware UTC datetime.

    The offset is the one the airport's zone has on that date, so DST is
    honoured. Unknown airports or zones fall back to reading the wall time
    as UTC (logged, not raised). Missing date or time gives None.
    """
    if not date_str or not time_str:
        return None
    d = parse_date(date_str)
    t = parse_time(time_str)
    if d is None or t is None:
        log_event(
            logger,
            "timestamp_unparseable",
            level=logging.WARNING,
            date_value=date_str,
            time_value=time_str,
            airport=airport_code,
        )
        return None

    naive = datetime.combine(d, t)
    lookup = airport_lookup or default_airports
    info = lookup.get_airport_info(airport_code) if airport_code else None
    zone = load_zone(info.timezone) if info and info.timezone else None
    if zone is None:
        log_event(
            logger,
            "timezone_unknown_assuming_utc",
            level=logging.WARNING,
            airport=airport_code,
            timezone_name=info.timezone if info else None,
        )
        return naive.replace(tzinfo=timezone.utc)

    return naive.replace(tzinfo=zone).astimezone(timezone.utc)


# ---------------- record normalization ----------------

# Per-field confidence keys; route counts only when both ends are present.
_CONFIDENCE_FIELDS = (
    "flight_number",
    "airline",
    "route",
    "passenger_name",
    "departure_date",
    "departure_time",
    "arrival_date",
    "arrival_time",
    "seat_numbers",
    "confirmation_code",
)


def _names_and_seats(record: Mapping[str, Any]) -> Tuple[List[str], List[str]]:
    names = present_list(record.get("passengerNames"))
    if not names:
        names = present_list(record.get("passengerName"))
    seats = present_list(record.get("seatNumbers"))
    if not seats:
        seats = present_list(record.get("seatNumber"))
    return names, [s.upper() for s in seats]


def normalize_flight(
    record: Mapping[str, Any],
    airport_lookup: Optional[AirportLookup] = None,
    today: Optional[date] = None,
) -> ExtractedFlight:
    """One AI flight sub-record -> ExtractedFlight."""
    field_conf = config.AI_FIELD_CONFIDENCE

    flight_number = _clean_flight_number(present(record.get("flightNumber")))
    airline = present(record.get("airlineName")) or present(record.get("airline"))
    origin = present(record.get("departureAirport")) or present(record.get("from"))
    dest = present(record.get("arrivalAirport")) or present(record.get("to"))
    origin = origin.upper() if origin else None
    dest = dest.upper() if dest else None

    departure_date = infer_year(present(record.get("departureDate")), today)
    arrival_date = infer_year(present(record.get("arrivalDate")), today)
    if departure_date and not arrival_date:
        arrival_date = departure_date
    departure_time = present(record.get("departureTime"))
    arrival_time = present(record.get("arrivalTime"))

    names, seats = _names_and_seats(record)
    confirmation = present(record.get("confirmationCode"))

    values: Dict[str, Any] = {
        "flight_number": flight_number,
        "airline": airline,
        "route": f"{origin}-{dest}" if origin and dest else None,
        "passenger_name": names[0] if names else None,
        "departure_date": departure_date,
        "departure_time": departure_time,
        "arrival_date": arrival_date,
        "arrival_time": arrival_time,
        "seat_numbers": ", ".join(seats) if seats else None,
        "confirmation_code": confirmation,
    }
    confidence = {k: (field_conf if values[k] else 0.0) for k in _CONFIDENCE_FIELDS}
    non_zero = [v for v in confidence.values() if v > 0]
    overall = sum(non_zero) / len(non_zero) if non_zero else field_conf

    all_matches: Dict[str, List[FieldCandidate]] = {}
    for key, value in values.items():
        if key == "passenger_name":
            continue
        all_matches[key] = [FieldCandidate(value=value, confidence=field_conf, source=FieldSource.AI)] if value else []
    all_matches["passenger_name"] = [
        FieldCandidate(value=n, confidence=field_conf, source=FieldSource.AI) for n in names
    ]

    return ExtractedFlight(
        flight_number=flight_number,
        airline=airline,
        from_airport=origin,
        to_airport=dest,
        date=departure_date,
        departure_date=departure_date,
        arrival_date=arrival_date,
        departure_time=departure_time,
        arrival_time=arrival_time,
        departure_datetime=synthesize_timestamp(departure_date, departure_time, origin, airport_lookup),
        arrival_datetime=synthesize_timestamp(arrival_date, arrival_time, dest, airport_lookup),
        passenger_name=names[0] if names else None,
        all_passenger_names=names,
        seat_numbers=seats,
        confirmation_code=confirmation,
        confidence=confidence,
        overall_confidence=overall,
        parse_strategy="ai",
        all_matches=all_matches,
    )


def normalize_ai_record(
    record: Mapping[str, Any],
    airport_lookup: Optional[AirportLookup] = None,
    today: Optional[date] = None,
) -> Union[ExtractedFlight, MultiFlightExtraction]:
    """
    {"flights": [a, ...]} -> MultiFlightExtraction, one flight per
    sub-record, even for a single one. A record without sub-records is
    itself the flight.
    """
    if not isinstance(record, Mapping):
        raise TypeError(f"AI record must be a mapping, got {type(record).__name__}")

    subrecords = record.get("flights")
    if isinstance(subrecords, list):
        subrecords = [r for r in subrecords if isinstance(r, Mapping)]
    else:
        subrecords = []

    if subrecords:
        flights = [normalize_flight(r, airport_lookup, today) for r in subrecords]
        log_event(logger, "ai_record_normalized", flights=len(flights), multiple_flights=True)
        return MultiFlightExtraction(multiple_flights=True, flights=flights)

    flight = normalize_flight(record, airport_lookup, today)
    log_event(
        logger,
        "ai_record_normalized",
        flights=1,
        multiple_flights=False,
        fields_present=flight.present_fields,
        overall_confidence=round(flight.overall_confidence, 3),
    )
    return flight


def flights_of(extraction: Union[ExtractedFlight, MultiFlightExtraction]) -> List[ExtractedFlight]:
    if isinstance(extraction, MultiFlightExtraction):
        return list(extraction.flights)
    return [extraction]
