from datetime import datetime, timezone

import pytest

from ticketintel.logging_utils import current_ticket_id
from ticketintel.models import MatchType, UnusableTicketError
from ticketintel.processing import (
    STATUS_NEEDS_PASSENGER,
    STATUS_PARTIAL,
    TicketProcessor,
    passenger_names_of,
)
from ticketintel.ai_normalizer import normalize_ai_record


@pytest.fixture
def processor(resolver) -> TicketProcessor:
    return TicketProcessor(resolver)


def _ai_flight(**overrides):
    base = {
        "airlineName": "United Airlines",
        "flightNumber": "UA 1855",
        "departureAirport": "SFO",
        "arrivalAirport": "LAX",
        "departureDate": "2025-12-11",
        "departureTime": "8:30 AM",
        "arrivalTime": "10:01 AM",
        "passengerNames": ["MARY JONES"],
        "seatNumbers": ["24A"],
        "confirmationCode": "QX7P2M",
    }
    base.update(overrides)
    return base


def test_text_ticket_links_existing_passenger(processor, store, american_ticket_text):
    result = processor.process_text(american_ticket_text, metadata={"ocr_confidence": 0.9})

    assert result.success is True
    assert result.issues == []
    [record] = result.flights
    assert record.flight_number == "AA1234"
    assert record.processing_status == STATUS_PARTIAL
    assert record.extracted_passenger_names == ["JOHN SMITH"]
    [link] = record.passengers
    assert (link.passenger_id, link.match_type, link.match_confidence) == ("p-1", MatchType.LEGAL_EXACT.value, 1.0)
    assert record.extracted_data.flight_number == "AA1234"
    assert result.metadata["extraction_method"] == "ocr"
    assert result.metadata["source_metadata"] == {"ocr_confidence": 0.9}
    assert (store.reads, store.writes) == (1, 1)


def test_unknown_passenger_is_auto_created(processor, store):
    result = processor.process_text("FLIGHT XY 789\nPASSENGER: JANE DOE\nORD-DEN\n")

    [record] = result.flights
    [link] = record.passengers
    assert link.match_type == "auto_created"
    assert link.match_confidence == 1.0
    assert record.processing_status == STATUS_NEEDS_PASSENGER
    assert "Auto-created new passenger: JANE DOE" in result.issues
    assert any(p.name == "JANE DOE" for p in store.passengers)


def test_cabin_line_is_not_auto_created(processor, store, american_ticket_text):
    result = processor.process_text(american_ticket_text + "Main Cabin - 23C\n")

    assert result.issues == []
    assert [link.passenger_id for link in result.flights[0].passengers] == ["p-1"]
    assert len(store.passengers) == 4


def test_unusable_ticket_raises(processor, store):
    with pytest.raises(UnusableTicketError) as excinfo:
        processor.process_text("nothing useful here")

    assert excinfo.value.issues == ["Missing required fields: flight_number, passenger_name"]
    assert store.reads == 0


def test_flight_without_passenger_needs_assignment(processor, store):
    result = processor.process_ai_record(_ai_flight(passengerNames="missing"))

    [record] = result.flights
    assert record.passengers == []
    assert record.processing_status == STATUS_NEEDS_PASSENGER
    assert "No passenger name extracted from ticket" in result.issues
    assert (store.reads, store.writes) == (0, 0)


def test_multi_flight_ticket_resolves_names_once(processor, store):
    record = {
        "flights": [
            _ai_flight(),
            _ai_flight(flightNumber="UA 22", departureAirport="LAX", arrivalAirport="SFO", passengerNames=["Mary  Jones"]),
        ]
    }
    result = processor.process_ai_record(record)

    assert len(result.flights) == 2
    assert len(result.resolutions) == 1
    assert (store.reads, store.writes) == (1, 1)
    ids = {r.passengers[0].passenger_id for r in result.flights}
    assert len(ids) == 1
    assert result.issues.count("Auto-created new passenger: MARY JONES") == 1
    assert result.flights[0].departure_datetime == datetime(2025, 12, 11, 16, 30, tzinfo=timezone.utc)


def test_partial_flight_in_multi_ticket_is_skipped(processor):
    record = {
        "flights": [
            _ai_flight(passengerNames=["JOHN SMITH"]),
            _ai_flight(flightNumber="missing", passengerNames=[]),
        ]
    }
    result = processor.process_ai_record(record)

    assert len(result.flights) == 1
    assert "Flight 2: Missing required fields: flight_number, passenger_name" in result.issues
    assert result.flights[0].processing_status == STATUS_PARTIAL


def test_raw_ai_reply_text_is_decoded(processor):
    reply = '```json\n{"flights": [' + '{"flightNumber": "UA1855", "passengerNames": ["JOHN SMITH"]}' + "]}\n```"
    result = processor.process_ai_record(reply)
    assert result.flights[0].flight_number == "UA1855"
    assert result.metadata["extraction_method"] == "ai"


def test_ticket_id_is_scoped_to_the_call(processor, american_ticket_text):
    before = current_ticket_id()
    result = processor.process_text(american_ticket_text)

    assert len(result.metadata["ticket_id"]) == 32
    assert current_ticket_id() == before


def test_passenger_names_of_dedupes_and_falls_back():
    flight = normalize_ai_record({"passengerNames": ["JOHN SMITH", "john  smith", " ", "JANE DOE"]})
    assert passenger_names_of(flight) == ["JOHN SMITH", "JANE DOE"]

    single = normalize_ai_record({"passengerName": "JANE DOE"})
    assert passenger_names_of(single) == ["JANE DOE"]
