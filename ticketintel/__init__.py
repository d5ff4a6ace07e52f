"""
ticketintel package

Public API:
    - FlightParser / parse_flight_text      raw ticket text -> ExtractedFlight
    - normalize_ai_record / decode_ai_response
    - PassengerMatcher / match_passenger
    - PassengerResolver / InMemoryRosterStore
    - TicketProcessor
    - normalize / decompose
    - configure_logging                     call once at application startup
"""

from .ai_normalizer import decode_ai_response, normalize_ai_record, synthesize_timestamp
from .airlines import AIRLINE_RULES, AirlineKey
from .airports import AirportDirectory, AirportInfo
from .extractor import detect_airline, extract_field
from .logging_utils import configure_logging
from .matcher import PassengerMatcher, match_passenger
from .models import (
    AIResponseDecodeError,
    ExtractedFlight,
    FieldCandidate,
    FieldSource,
    FlightRecord,
    MatchResult,
    MatchType,
    MultiFlightExtraction,
    NameComponents,
    Passenger,
    PassengerLink,
    RawTicketText,
    ResolvedPassenger,
    RosterStoreError,
    RosterStoreUnavailable,
    TicketIntelError,
    TicketProcessingResult,
    UnusableTicketError,
)
from .names import decompose, normalize
from .parser import FlightParser, parse_flight_text
from .processing import TicketProcessor
from .resolver import InMemoryRosterStore, PassengerResolver, RosterStore, resolve_in_roster

__version__ = "0.1.0"

__all__ = [
    "AIRLINE_RULES",
    "AIResponseDecodeError",
    "AirlineKey",
    "AirportDirectory",
    "AirportInfo",
    "ExtractedFlight",
    "FieldCandidate",
    "FieldSource",
    "FlightParser",
    "FlightRecord",
    "InMemoryRosterStore",
    "MatchResult",
    "MatchType",
    "MultiFlightExtraction",
    "NameComponents",
    "Passenger",
    "PassengerLink",
    "PassengerMatcher",
    "PassengerResolver",
    "RawTicketText",
    "ResolvedPassenger",
    "RosterStore",
    "RosterStoreError",
    "RosterStoreUnavailable",
    "TicketIntelError",
    "TicketProcessingResult",
    "TicketProcessor",
    "UnusableTicketError",
    "configure_logging",
    "decode_ai_response",
    "decompose",
    "detect_airline",
    "extract_field",
    "match_passenger",
    "normalize",
    "normalize_ai_record",
    "parse_flight_text",
    "resolve_in_roster",
    "synthesize_timestamp",
]
