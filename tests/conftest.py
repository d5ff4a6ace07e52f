"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest

from ticketintel.matcher import PassengerMatcher
from ticketintel.models import Passenger
from ticketintel.resolver import InMemoryRosterStore, PassengerResolver


def make_passenger(pid, name, legal_name=None, extracted_names=None):
    return Passenger(id=pid, name=name, legal_name=legal_name, extracted_names=extracted_names or [])


@pytest.fixture
def roster():
    """Small roster covering the legal/display/history shapes the matcher sees."""
    return [
        make_passenger("p-1", "Johnny", legal_name="John Smith"),
        make_passenger("p-2", "Maria Garcia", legal_name="Maria Elena Garcia"),
        make_passenger("p-3", "Bob Lee", extracted_names=["LEE/ROBERT MR"]),
        make_passenger("p-4", "Ann Kowalski"),
    ]


@pytest.fixture
def strict_matcher() -> PassengerMatcher:
    """Matcher without the fuzzy last resort."""
    return PassengerMatcher(enable_fuzzy=False)


@pytest.fixture
def store(roster) -> InMemoryRosterStore:
    return InMemoryRosterStore(roster)


@pytest.fixture
def resolver(store, strict_matcher) -> PassengerResolver:
    return PassengerResolver(store, matcher=strict_matcher)


@pytest.fixture
def reference_day() -> date:
    return date(2025, 6, 15)


@pytest.fixture
def american_ticket_text() -> str:
    return (
        "AMERICAN AIRLINES\n"
        "Flight AA1234\n"
        "JFK to LAX\n"
        "Passenger: JOHN SMITH\n"
        "Confirmation: ABC123\n"
        "Date: 15DEC2025\n"
        "Depart 8:30 AM  Arrive 11:45 AM\n"
        "Seat 23C\n"
    )
