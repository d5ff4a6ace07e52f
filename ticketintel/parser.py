# parser.py
"""
Flight Parser: turns raw ticket text (OCR output) into an ExtractedFlight.

Every step is independent. A step that finds nothing, or blows up on odd
input, leaves its field empty and the rest of the record is still built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from . import config
from .airlines import AirlineRules, get_rules
from .extractor import collect_field, detect_airline
from .logging_utils import log_event
from .models import ExtractedFlight, FieldCandidate, RawTicketText
from .patterns import patterns

logger = logging.getLogger("ticketintel.parser")


@dataclass
class _Draft:
    values: Dict[str, Any] = field(default_factory=dict)
    confidence: Dict[str, float] = field(default_factory=dict)
    all_matches: Dict[str, List[FieldCandidate]] = field(default_factory=dict)
    seats: List[str] = field(default_factory=list)

    def take_best(self, name: str, candidates: List[FieldCandidate]) -> Optional[FieldCandidate]:
        self.all_matches[name] = candidates
        if not candidates:
            return None
        best = candidates[0]
        self.confidence[name] = best.confidence
        return best

    def add_seat(self, seat: str) -> None:
        if seat and seat not in self.seats:
            self.seats.append(seat)


def overall_confidence(confidence: Dict[str, float]) -> float:
    """Mean of the per-field confidences that are present; 0 when none are."""
    values = [v for v in confidence.values() if v is not None]
    if not values:
        return 0.0
    return sum(values) / len(values)


class FlightParser:
    def parse(
        self,
        text: Union[str, RawTicketText, None],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ExtractedFlight:
        if isinstance(text, RawTicketText):
            metadata = metadata or text.metadata
            text = text.text
        text = text or ""

        draft = _Draft()
        airline_key = self._step("airline", lambda: detect_airline(text))
        rules = get_rules(airline_key)

        self._step("flight_number", lambda: self._flight_number(text, rules, draft))
        self._step("passenger_name", lambda: self._passengers(text, rules, draft))
        self._step("route", lambda: self._route(text, rules, draft))
        self._step("confirmation_code", lambda: self._confirmation(text, rules, draft))
        self._step("date", lambda: self._date(text, rules, draft))
        self._step("time", lambda: self._times(text, draft))
        self._step("seat", lambda: self._seat(text, draft))

        names = draft.values.get("passenger_names", [])
        flight = ExtractedFlight(
            flight_number=draft.values.get("flight_number"),
            airline=rules.name if rules else None,
            from_airport=draft.values.get("from"),
            to_airport=draft.values.get("to"),
            date=draft.values.get("date"),
            departure_time=draft.values.get("departure_time"),
            arrival_time=draft.values.get("arrival_time"),
            passenger_name=names[0] if names else None,
            all_passenger_names=names,
            seat_numbers=draft.seats,
            confirmation_code=draft.values.get("confirmation_code"),
            confidence=draft.confidence,
            overall_confidence=overall_confidence(draft.confidence),
            parse_strategy=rules.parse_strategy if rules else "generic",
            detected_airline=airline_key.value if airline_key else None,
            all_matches=draft.all_matches,
        )

        log_event(
            logger,
            "ticket_text_parsed",
            strategy=flight.parse_strategy,
            fields_extracted=sorted(draft.confidence),
            overall_confidence=round(flight.overall_confidence, 3),
            text_length=len(text),
            ocr_metadata=metadata or None,
        )
        return flight

    # ---------------- steps ----------------

    @staticmethod
    def _step(name: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except Exception as e:  # one bad field never sinks the record
            log_event(logger, "parse_step_failed", level=logging.WARNING, step=name, error=str(e))
            return None

    @staticmethod
    def _flight_number(text: str, rules: Optional[AirlineRules], draft: _Draft) -> None:
        found = collect_field(text, rules.flight if rules else None, patterns.FLIGHT_NO)
        best = draft.take_best("flight_number", found.candidates)
        if best:
            draft.values["flight_number"] = best.value

    @staticmethod
    def _passengers(text: str, rules: Optional[AirlineRules], draft: _Draft) -> None:
        found = collect_field(text, rules.passenger if rules else None, patterns.PASSENGER)
        best = draft.take_best("passenger_name", found.candidates)
        # Names from bare "NAME - 24A" lines only count when nothing is labeled
        names = [c.value for c in found.labeled] or ([best.value] if best else [])
        draft.values["passenger_names"] = names
        for seat in found.seats:
            draft.add_seat(seat)

    @staticmethod
    def _route(text: str, rules: Optional[AirlineRules], draft: _Draft) -> None:
        found = collect_field(text, rules.route if rules else None, patterns.ROUTE)
        best = draft.take_best("route", found.candidates)
        if best:
            origin, _, dest = best.value.partition("-")
            draft.values["from"] = origin.upper()
            draft.values["to"] = dest.upper()

    @staticmethod
    def _confirmation(text: str, rules: Optional[AirlineRules], draft: _Draft) -> None:
        found = collect_field(text, rules.confirmation if rules else None, patterns.CONFIRMATION)
        best = draft.take_best("confirmation_code", found.candidates)
        if best:
            draft.values["confirmation_code"] = best.value

    @staticmethod
    def _date(text: str, rules: Optional[AirlineRules], draft: _Draft) -> None:
        found = collect_field(text, rules.date if rules else None, patterns.DATE)
        best = draft.take_best("date", found.candidates)
        if best:
            draft.values["date"] = best.value

    @staticmethod
    def _times(text: str, draft: _Draft) -> None:
        times = [t.strip() for t in patterns.TIME.findall(text)]
        if not times:
            return
        draft.values["departure_time"] = times[0]
        if len(times) >= 2:
            draft.values["arrival_time"] = times[1]
        draft.confidence["time"] = config.TIME_CONFIDENCE

    @staticmethod
    def _seat(text: str, draft: _Draft) -> None:
        m = patterns.SEAT.search(text)
        if m and m.group(1):
            draft.add_seat(m.group(1).upper())
            draft.confidence["seat"] = config.SEAT_CONFIDENCE


_default_parser = FlightParser()


def parse_flight_text(text: Union[str, RawTicketText, None], metadata: Optional[Dict[str, Any]] = None) -> ExtractedFlight:
    return _default_parser.parse(text, metadata)
