# airports.py
# Default airport -> civil timezone directory. Callers with a fuller airport
# database pass their own object exposing get_airport_info(code).

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Optional, Protocol, Tuple

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel


class AirportInfo(BaseModel):
    code: str
    name: str
    city: str
    state: Optional[str] = None
    timezone: Optional[str] = None


class AirportLookup(Protocol):
    def get_airport_info(self, code: str) -> Optional[AirportInfo]:
        ...


# code: (name, city, state, timezone)
_AIRPORTS: Dict[str, Tuple[str, str, Optional[str], str]] = {
    # Eastern
    "JFK": ("John F. Kennedy International Airport", "New York", "NY", "America/New_York"),
    "LGA": ("LaGuardia Airport", "New York", "NY", "America/New_York"),
    "EWR": ("Newark Liberty International Airport", "Newark", "NJ", "America/New_York"),
    "ATL": ("Hartsfield-Jackson Atlanta International Airport", "Atlanta", "GA", "America/New_York"),
    "BOS": ("Boston Logan International Airport", "Boston", "MA", "America/New_York"),
    "DCA": ("Ronald Reagan Washington National Airport", "Washington", "DC", "America/New_York"),
    "IAD": ("Washington Dulles International Airport", "Washington", "VA", "America/New_York"),
    "MIA": ("Miami International Airport", "Miami", "FL", "America/New_York"),
    "FLL": ("Fort Lauderdale-Hollywood International Airport", "Fort Lauderdale", "FL", "America/New_York"),
    "MCO": ("Orlando International Airport", "Orlando", "FL", "America/New_York"),
    "TPA": ("Tampa International Airport", "Tampa", "FL", "America/New_York"),
    "JAX": ("Jacksonville International Airport", "Jacksonville", "FL", "America/New_York"),
    "PHL": ("Philadelphia International Airport", "Philadelphia", "PA", "America/New_York"),
    "PIT": ("Pittsburgh International Airport", "Pittsburgh", "PA", "America/New_York"),
    "CLT": ("Charlotte Douglas International Airport", "Charlotte", "NC", "America/New_York"),
    "RDU": ("Raleigh-Durham International Airport", "Raleigh", "NC", "America/New_York"),
    "BWI": ("Baltimore/Washington International Airport", "Baltimore", "MD", "America/New_York"),
    "DTW": ("Detroit Metropolitan Wayne County Airport", "Detroit", "MI", "America/Detroit"),
    "CLE": ("Cleveland Hopkins International Airport", "Cleveland", "OH", "America/New_York"),
    "CMH": ("John Glenn Columbus International Airport", "Columbus", "OH", "America/New_York"),
    "CVG": ("Cincinnati/Northern Kentucky International Airport", "Cincinnati", "KY", "America/New_York"),
    "IND": ("Indianapolis International Airport", "Indianapolis", "IN", "America/Indiana/Indianapolis"),
    # Central
    "ORD": ("O'Hare International Airport", "Chicago", "IL", "America/Chicago"),
    "MDW": ("Chicago Midway International Airport", "Chicago", "IL", "America/Chicago"),
    "DFW": ("Dallas/Fort Worth International Airport", "Dallas", "TX", "America/Chicago"),
    "DAL": ("Dallas Love Field", "Dallas", "TX", "America/Chicago"),
    "IAH": ("George Bush Intercontinental Airport", "Houston", "TX", "America/Chicago"),
    "HOU": ("William P. Hobby Airport", "Houston", "TX", "America/Chicago"),
    "AUS": ("Austin-Bergstrom International Airport", "Austin", "TX", "America/Chicago"),
    "SAT": ("San Antonio International Airport", "San Antonio", "TX", "America/Chicago"),
    "MSP": ("Minneapolis-Saint Paul International Airport", "Minneapolis", "MN", "America/Chicago"),
    "STL": ("St. Louis Lambert International Airport", "St. Louis", "MO", "America/Chicago"),
    "MCI": ("Kansas City International Airport", "Kansas City", "MO", "America/Chicago"),
    "MKE": ("Milwaukee Mitchell International Airport", "Milwaukee", "WI", "America/Chicago"),
    "MSY": ("Louis Armstrong New Orleans International Airport", "New Orleans", "LA", "America/Chicago"),
    "BNA": ("Nashville International Airport", "Nashville", "TN", "America/Chicago"),
    "MEM": ("Memphis International Airport", "Memphis", "TN", "America/Chicago"),
    "OKC": ("Will Rogers World Airport", "Oklahoma City", "OK", "America/Chicago"),
    # Mountain
    "DEN": ("Denver International Airport", "Denver", "CO", "America/Denver"),
    "SLC": ("Salt Lake City International Airport", "Salt Lake City", "UT", "America/Denver"),
    "ABQ": ("Albuquerque International Sunport", "Albuquerque", "NM", "America/Denver"),
    "BOI": ("Boise Airport", "Boise", "ID", "America/Boise"),
    # Arizona (no DST)
    "PHX": ("Phoenix Sky Harbor International Airport", "Phoenix", "AZ", "America/Phoenix"),
    "TUS": ("Tucson International Airport", "Tucson", "AZ", "America/Phoenix"),
    # Pacific
    "LAX": ("Los Angeles International Airport", "Los Angeles", "CA", "America/Los_Angeles"),
    "SFO": ("San Francisco International Airport", "San Francisco", "CA", "America/Los_Angeles"),
    "SEA": ("Seattle-Tacoma International Airport", "Seattle", "WA", "America/Los_Angeles"),
    "SAN": ("San Diego International Airport", "San Diego", "CA", "America/Los_Angeles"),
    "PDX": ("Portland International Airport", "Portland", "OR", "America/Los_Angeles"),
    "LAS": ("Harry Reid International Airport", "Las Vegas", "NV", "America/Los_Angeles"),
    "SJC": ("San Jose Mineta International Airport", "San Jose", "CA", "America/Los_Angeles"),
    "OAK": ("Oakland International Airport", "Oakland", "CA", "America/Los_Angeles"),
    "SMF": ("Sacramento International Airport", "Sacramento", "CA", "America/Los_Angeles"),
    "BUR": ("Hollywood Burbank Airport", "Burbank", "CA", "America/Los_Angeles"),
    "ONT": ("Ontario International Airport", "Ontario", "CA", "America/Los_Angeles"),
    "SNA": ("John Wayne Airport", "Santa Ana", "CA", "America/Los_Angeles"),
    # Alaska / Hawaii
    "ANC": ("Ted Stevens Anchorage International Airport", "Anchorage", "AK", "America/Anchorage"),
    "FAI": ("Fairbanks International Airport", "Fairbanks", "AK", "America/Anchorage"),
    "HNL": ("Daniel K. Inouye International Airport", "Honolulu", "HI", "Pacific/Honolulu"),
    "OGG": ("Kahului Airport", "Kahului", "HI", "Pacific/Honolulu"),
    "KOA": ("Ellison Onizuka Kona International Airport", "Kailua-Kona", "HI", "Pacific/Honolulu"),
    # Caribbean
    "SJU": ("Luis Munoz Marin International Airport", "San Juan", "PR", "America/Puerto_Rico"),
    # International hubs
    "YYZ": ("Toronto Pearson International Airport", "Toronto", "ON", "America/Toronto"),
    "YVR": ("Vancouver International Airport", "Vancouver", "BC", "America/Vancouver"),
    "MEX": ("Mexico City International Airport", "Mexico City", None, "America/Mexico_City"),
    "LHR": ("London Heathrow Airport", "London", None, "Europe/London"),
    "CDG": ("Paris Charles de Gaulle Airport", "Paris", None, "Europe/Paris"),
    "FRA": ("Frankfurt Airport", "Frankfurt", None, "Europe/Berlin"),
    "AMS": ("Amsterdam Airport Schiphol", "Amsterdam", None, "Europe/Amsterdam"),
    "DXB": ("Dubai International Airport", "Dubai", None, "Asia/Dubai"),
    "DEL": ("Indira Gandhi International Airport", "Delhi", None, "Asia/Kolkata"),
    "BOM": ("Chhatrapati Shivaji Maharaj International Airport", "Mumbai", None, "Asia/Kolkata"),
    "NRT": ("Narita International Airport", "Tokyo", None, "Asia/Tokyo"),
    "SYD": ("Sydney Kingsford Smith Airport", "Sydney", None, "Australia/Sydney"),
}


class AirportDirectory:
    """In-memory airport lookup keyed by IATA code (case-insensitive)."""

    def __init__(self, airports: Optional[Dict[str, Tuple[str, str, Optional[str], str]]] = None):
        self._airports = {k.upper(): v for k, v in (airports if airports is not None else _AIRPORTS).items()}

    def get_airport_info(self, code: str) -> Optional[AirportInfo]:
        if not code:
            return None
        row = self._airports.get(code.strip().upper())
        if row is None:
            return None
        name, city, state, tz = row
        return AirportInfo(code=code.strip().upper(), name=name, city=city, state=state, timezone=tz)


@lru_cache(maxsize=128)
def load_zone(tz_name: str) -> Optional[ZoneInfo]:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


default_airports = AirportDirectory()
