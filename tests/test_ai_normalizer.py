import logging
from datetime import date, datetime, time, timezone

import pytest

from ticketintel.ai_normalizer import (
    decode_ai_response,
    infer_year,
    normalize_ai_record,
    parse_time,
    present,
    synthesize_timestamp,
)
from ticketintel.airports import AirportDirectory
from ticketintel.models import AIResponseDecodeError, ExtractedFlight, FieldSource, MultiFlightExtraction


def _record(**overrides):
    base = {
        "airlineName": "American Airlines",
        "flightNumber": "aa 1234",
        "departureAirport": "jfk",
        "arrivalAirport": "LAX",
        "departureDate": "2025-12-11",
        "departureTime": "8:30 AM",
        "arrivalDate": "missing",
        "arrivalTime": "11:45 AM",
        "passengerNames": ["JOHN SMITH"],
        "seatNumbers": ["24a"],
        "confirmationCode": "ABC123",
    }
    base.update(overrides)
    return base


def test_departure_instant_uses_airport_timezone():
    flight = normalize_ai_record(_record())

    assert isinstance(flight, ExtractedFlight)
    assert flight.departure_datetime == datetime(2025, 12, 11, 13, 30, tzinfo=timezone.utc)
    assert flight.arrival_datetime == datetime(2025, 12, 11, 19, 45, tzinfo=timezone.utc)


def test_record_cleanup():
    flight = normalize_ai_record(_record())

    assert flight.flight_number == "AA1234"
    assert (flight.from_airport, flight.to_airport) == ("JFK", "LAX")
    assert flight.arrival_date == "2025-12-11"
    assert flight.seat_numbers == ["24A"]
    assert flight.confirmation_code == "ABC123"
    assert flight.parse_strategy == "ai"


def test_summer_offset_follows_dst():
    flight = normalize_ai_record(_record(departureDate="2025-07-04"))
    assert flight.departure_datetime == datetime(2025, 7, 4, 12, 30, tzinfo=timezone.utc)


def test_present_fields_get_fixed_confidence():
    flight = normalize_ai_record(_record())

    assert flight.confidence["flight_number"] == 0.95
    assert flight.confidence["route"] == 0.95
    assert flight.overall_confidence == pytest.approx(0.95)
    assert flight.all_matches["flight_number"][0].source == FieldSource.AI


def test_route_confidence_needs_both_airports():
    flight = normalize_ai_record(_record(arrivalAirport="missing"))
    assert flight.from_airport == "JFK"
    assert flight.to_airport is None
    assert flight.confidence["route"] == 0.0


def test_missing_sentinel_is_absent_everywhere():
    flight = normalize_ai_record(
        {
            "flightNumber": "missing",
            "departureAirport": "missing",
            "departureDate": "missing",
            "departureTime": "missing",
            "passengerNames": ["missing"],
            "seatNumbers": "missing",
        }
    )
    assert flight.flight_number is None
    assert flight.from_airport is None
    assert flight.all_passenger_names == []
    assert flight.seat_numbers == []
    assert flight.departure_datetime is None
    assert all(v == 0.0 for v in flight.confidence.values())
    assert flight.overall_confidence == pytest.approx(0.95)


def test_legacy_single_name_and_seat_fields():
    flight = normalize_ai_record({"passengerName": "JANE DOE", "seatNumber": "12a"})
    assert flight.all_passenger_names == ["JANE DOE"]
    assert flight.passenger_name == "JANE DOE"
    assert flight.seat_numbers == ["12A"]


def test_names_are_not_deduplicated_here():
    flight = normalize_ai_record(_record(passengerNames=["JOHN SMITH", "John  Smith"]))
    assert flight.all_passenger_names == ["JOHN SMITH", "John  Smith"]


def test_multiple_flights():
    record = {
        "flights": [
            _record(),
            _record(flightNumber="AA 88", departureAirport="LAX", arrivalAirport="SFO", departureTime="2:15 PM"),
        ]
    }
    result = normalize_ai_record(record)

    assert isinstance(result, MultiFlightExtraction)
    assert result.multiple_flights is True
    assert [f.flight_number for f in result.flights] == ["AA1234", "AA88"]
    assert all(f.overall_confidence > 0 for f in result.flights)
    assert result.flights[1].departure_datetime == datetime(2025, 12, 11, 22, 15, tzinfo=timezone.utc)


def test_single_element_flights_list_stays_a_collection():
    result = normalize_ai_record({"flights": [_record()]})
    assert isinstance(result, MultiFlightExtraction)
    assert [f.flight_number for f in result.flights] == ["AA1234"]


def test_empty_flights_list_falls_back_to_top_level_record():
    result = normalize_ai_record({**_record(), "flights": []})
    assert isinstance(result, ExtractedFlight)
    assert result.flight_number == "AA1234"


def test_non_scalar_values_are_absent():
    flight = normalize_ai_record(_record(passengerNames=[{"name": "X"}, "JANE DOE"], confirmationCode=["QX7P2M"]))
    assert flight.all_passenger_names == ["JANE DOE"]
    assert flight.confirmation_code is None
    assert present(1855) == "1855"
    assert present(True) is None


def test_non_mapping_record_rejected():
    with pytest.raises(TypeError):
        normalize_ai_record(["not", "a", "record"])


@pytest.mark.parametrize(
    "value,expected",
    [
        ("8:30 AM", time(8, 30)),
        ("8:30am", time(8, 30)),
        ("12:00 PM", time(12, 0)),
        ("12 PM", time(12, 0)),
        ("12:15 AM", time(0, 15)),
        ("11:59 p.m.", time(23, 59)),
        ("20:15", time(20, 15)),
        ("25:00", None),
        ("13:00 PM", None),
        ("soon", None),
        ("", None),
    ],
)
def test_parse_time(value, expected):
    assert parse_time(value) == expected


def test_unknown_airport_falls_back_to_utc(caplog):
    with caplog.at_level(logging.WARNING, logger="ticketintel.ai_normalizer"):
        instant = synthesize_timestamp("2025-12-11", "8:30 AM", "ZZZ")

    assert instant == datetime(2025, 12, 11, 8, 30, tzinfo=timezone.utc)
    assert any(getattr(r, "event", None) == "timezone_unknown_assuming_utc" for r in caplog.records)


def test_custom_airport_lookup():
    lookup = AirportDirectory({"XYZ": ("Test Field", "Testville", None, "Asia/Tokyo")})
    instant = synthesize_timestamp("2025-01-10", "9:00 AM", "xyz", lookup)
    assert instant == datetime(2025, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("d,t", [(None, "8:30 AM"), ("2025-12-11", None), ("", "")])
def test_no_timestamp_without_date_and_time(d, t):
    assert synthesize_timestamp(d, t, "JFK") is None


@pytest.mark.parametrize(
    "value,today,expected",
    [
        ("01/15", date(2025, 11, 20), "2026-01-15"),
        ("04-30", date(2025, 12, 1), "2026-04-30"),
        ("Dec 11", date(2025, 11, 20), "2025-12-11"),
        ("05/20", date(2025, 11, 20), "2025-05-20"),
        ("01/15", date(2025, 6, 15), "2025-01-15"),
        ("2025-03-01", date(2025, 11, 20), "2025-03-01"),
        ("next tuesday", date(2025, 11, 20), "next tuesday"),
    ],
)
def test_infer_year(value, today, expected):
    assert infer_year(value, today) == expected


def test_year_inference_applies_to_records():
    flight = normalize_ai_record(
        _record(departureDate="Jan 5", departureTime="missing"),
        today=date(2025, 12, 20),
    )
    assert flight.departure_date == "2026-01-05"
    assert flight.arrival_date == "2026-01-05"


@pytest.mark.parametrize("value", ["missing", "MISSING", "  ", "", None])
def test_present_treats_sentinels_as_absent(value):
    assert present(value) is None


def test_decode_fenced_response():
    text = '```json\n{"flights": [{"flightNumber": "UA1855"}]}\n```'
    assert decode_ai_response(text) == {"flights": [{"flightNumber": "UA1855"}]}


def test_decode_plain_response():
    assert decode_ai_response('{"flightNumber": "UA1855"}') == {"flightNumber": "UA1855"}


@pytest.mark.parametrize("text", ["", "not json", "[1, 2]"])
def test_decode_rejects_bad_replies(text):
    with pytest.raises(AIResponseDecodeError):
        decode_ai_response(text)
