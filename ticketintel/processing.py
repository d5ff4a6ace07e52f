# processing.py
"""
Ticket processing: extraction (OCR text or AI record) -> passenger
resolution -> flight records ready for the flight store.

All names on one ticket, across all of its flights, are resolved in a single
roster read/write cycle. Flights are returned, never persisted here.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from . import config
from .ai_normalizer import decode_ai_response, flights_of, normalize_ai_record
from .airports import AirportLookup, default_airports
from .logging_utils import (
    current_ticket_id,
    get_logger,
    log_event,
    new_ticket_id,
    set_ticket_id,
)
from .models import (
    ExtractedFlight,
    FlightRecord,
    PassengerLink,
    ResolvedPassenger,
    TicketProcessingResult,
    UnusableTicketError,
    name_key,
)
from .parser import FlightParser
from .resolver import PassengerResolver

logger = logging.getLogger("ticketintel.processing")

AUTO_CREATED = "auto_created"
STATUS_PARTIAL = "partial"
STATUS_NEEDS_PASSENGER = "requires_passenger_assignment"


def passenger_names_of(flight: ExtractedFlight) -> List[str]:
    """Names on one flight, raw text kept, duplicates (case/spacing) dropped."""
    raw = flight.all_passenger_names or ([flight.passenger_name] if flight.passenger_name else [])
    seen = set()
    names = []
    for n in raw:
        if not n or not n.strip():
            continue
        key = name_key(n)
        if key in seen:
            continue
        seen.add(key)
        names.append(n.strip())
    return names


def missing_required(flight: ExtractedFlight) -> List[str]:
    missing = []
    if not flight.flight_number:
        missing.append("flight_number")
    if not passenger_names_of(flight):
        missing.append("passenger_name")
    return missing


class TicketProcessor:
    def __init__(
        self,
        resolver: PassengerResolver,
        airport_lookup: Optional[AirportLookup] = None,
        parser: Optional[FlightParser] = None,
        created_by: Optional[str] = None,
    ):
        self.resolver = resolver
        self.airport_lookup = airport_lookup or default_airports
        self.parser = parser or FlightParser()
        self.created_by = created_by or config.FLIGHT_CREATED_BY
        self.log = get_logger("ticketintel.processing")

    def process_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> TicketProcessingResult:
        return self._run("ocr", lambda: [self.parser.parse(text, metadata)], metadata)

    def process_ai_record(
        self,
        record: Union[str, Mapping[str, Any]],
        today: Optional[date] = None,
    ) -> TicketProcessingResult:
        """Accepts the decoded record or the model's raw reply text."""

        def extract() -> List[ExtractedFlight]:
            data = decode_ai_response(record) if isinstance(record, str) else record
            return flights_of(normalize_ai_record(data, self.airport_lookup, today))

        return self._run("ai", extract)

    # ---------------- internals ----------------

    def _run(
        self,
        method: str,
        extract: Callable[[], List[ExtractedFlight]],
        source_metadata: Optional[Dict[str, Any]] = None,
    ) -> TicketProcessingResult:
        previous = current_ticket_id()
        ticket_id = new_ticket_id()
        self.log.start_timer("ticket")
        try:
            log_event(logger, "ticket_processing_started", extraction_method=method)
            flights = extract()
            issues: List[str] = []
            usable = self._usable(flights, issues)
            if not usable:
                log_event(logger, "ticket_unusable", level=logging.WARNING, issues=issues)
                raise UnusableTicketError("No usable flight data extracted from ticket", issues)

            resolutions = self._resolve(usable)
            by_key = {name_key(r.match.extracted_name): r for r in resolutions}
            for r in resolutions:
                if r.created:
                    issues.append(f"Auto-created new passenger: {r.passenger.name}")

            records = [self._record(f, by_key) for f in usable]
            elapsed = self.log.end_timer("ticket")
            log_event(
                logger,
                "ticket_processed",
                extraction_method=method,
                flights=len(records),
                passengers_resolved=len(resolutions),
                issues_count=len(issues),
                duration_ms=int(elapsed * 1000),
            )
            return TicketProcessingResult(
                success=True,
                flights=records,
                resolutions=resolutions,
                issues=issues,
                metadata={
                    "ticket_id": ticket_id,
                    "extraction_method": method,
                    "flights_extracted": len(flights),
                    "flights_usable": len(usable),
                    "duration_ms": int(elapsed * 1000),
                    "source_metadata": source_metadata or {},
                },
            )
        except Exception:
            self.log.end_timer("ticket")
            raise
        finally:
            set_ticket_id(previous)

    @staticmethod
    def _usable(flights: List[ExtractedFlight], issues: List[str]) -> List[ExtractedFlight]:
        usable = []
        multi = len(flights) > 1
        for i, flight in enumerate(flights, start=1):
            label = f"Flight {i}: " if multi else ""
            missing = missing_required(flight)
            if len(missing) == 2:
                issues.append(f"{label}Missing required fields: {', '.join(missing)}")
                continue
            if "flight_number" in missing:
                issues.append(f"{label}Missing required fields: flight_number")
            if "passenger_name" in missing:
                issues.append(f"{label}No passenger name extracted from ticket")
            usable.append(flight)
        return usable

    def _resolve(self, flights: List[ExtractedFlight]) -> List[ResolvedPassenger]:
        seen = set()
        names = []
        for flight in flights:
            for n in passenger_names_of(flight):
                key = name_key(n)
                if key not in seen:
                    seen.add(key)
                    names.append(n)
        return self.resolver.resolve_many(names)

    def _record(
        self,
        flight: ExtractedFlight,
        resolved: Dict[str, ResolvedPassenger],
    ) -> FlightRecord:
        names = passenger_names_of(flight)
        links: List[PassengerLink] = []
        all_existing = bool(names)
        for n in names:
            r = resolved[name_key(n)]
            if r.created:
                all_existing = False
                match_type, confidence = AUTO_CREATED, 1.0
            else:
                match_type, confidence = r.match.match_type.value, r.match.confidence
            links.append(
                PassengerLink(
                    passenger_id=r.passenger.id,
                    name=r.passenger.name,
                    extracted_name=n,
                    match_type=match_type,
                    match_confidence=confidence,
                )
            )

        return FlightRecord(
            flight_number=flight.flight_number,
            airline=flight.airline,
            from_airport=flight.from_airport,
            to_airport=flight.to_airport,
            departure_datetime=flight.departure_datetime,
            arrival_datetime=flight.arrival_datetime,
            passengers=links,
            extracted_passenger_names=names,
            seat_numbers=list(flight.seat_numbers),
            confirmation_code=flight.confirmation_code,
            parse_strategy=flight.parse_strategy,
            overall_confidence=flight.overall_confidence,
            processing_status=STATUS_PARTIAL if all_existing else STATUS_NEEDS_PASSENGER,
            extracted_data=flight,
            created_by=self.created_by,
        )
