# airlines.py
# ---------------------------------------------------------------------
# Per-airline ticket layouts. Detection walks AIRLINE_RULES in declared
# order and the first airline whose identifier appears in the text wins,
# so carriers with short, collision-prone codes belong further down.

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .patterns import (
    NAME_CHARS,
    FieldRule,
    first_group,
    flight_value,
    passenger_labeled,
    passenger_seat,
    passenger_value,
    route_value,
)

_MONTHS = r"(?:JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC)"
_CODE = r"\b([A-Z]{3})"


class AirlineKey(str, Enum):
    AMERICAN = "american"
    DELTA = "delta"
    UNITED = "united"
    SOUTHWEST = "southwest"
    JETBLUE = "jetblue"
    SPIRIT = "spirit"


@dataclass(frozen=True)
class AirlineRules:
    key: AirlineKey
    name: str
    iata: str
    codes: Tuple[str, ...]
    flight: FieldRule
    date: FieldRule
    route: FieldRule
    passenger: FieldRule
    confirmation: FieldRule

    @property
    def parse_strategy(self) -> str:
        return f"airline_specific_{self.key.value}"


def _flight(prefix: str) -> FieldRule:
    return FieldRule(re.compile(rf"\b(?:{prefix})\s*(\d{{3,4}})\b", re.IGNORECASE), flight_value)


def _route(separators: str) -> FieldRule:
    return FieldRule(re.compile(rf"{_CODE}\s*(?:{separators})\s*([A-Z]{{3}})\b"), route_value)


def _passenger(label: str) -> FieldRule:
    return FieldRule(
        re.compile(rf"(?:{label})\s*[:\s\-]?\s*({NAME_CHARS}+)", re.IGNORECASE),
        passenger_value,
    )


def _confirmation(label: str) -> FieldRule:
    return FieldRule(re.compile(rf"(?i:{label})\s*[:\-]?\s*([A-Z0-9]{{6}})\b"), first_group)


_SLASH_DATE = FieldRule(re.compile(r"\b(\d{1,2}/\d{1,2}/\d{2,4})\b"))
_SPACED_DATE = FieldRule(re.compile(rf"\b(\d{{1,2}}\s{_MONTHS}\s\d{{4}})\b", re.IGNORECASE))


AIRLINE_RULES: Dict[AirlineKey, AirlineRules] = {
    AirlineKey.AMERICAN: AirlineRules(
        key=AirlineKey.AMERICAN,
        name="American Airlines",
        iata="AA",
        codes=("AA", "AMERICAN"),
        flight=_flight(r"AA|American(?:\s+Airlines)?"),
        date=FieldRule(re.compile(rf"\b(\d{{1,2}}\s?{_MONTHS}\s?\d{{2,4}})\b", re.IGNORECASE)),
        route=_route(r"to|TO|→|-|>"),
        passenger=_passenger(r"passenger(?:\s+name)?|name"),
        confirmation=_confirmation(r"confirmation|record\s+locator"),
    ),
    AirlineKey.DELTA: AirlineRules(
        key=AirlineKey.DELTA,
        name="Delta Air Lines",
        iata="DL",
        codes=("DL", "DELTA"),
        flight=_flight(r"DL|Delta(?:\s+Air\s+Lines)?"),
        date=_SPACED_DATE,
        route=_route(r"-|to|TO"),
        passenger=_passenger(r"passenger(?:\s+name)?"),
        confirmation=_confirmation(r"confirmation|pnr"),
    ),
    AirlineKey.UNITED: AirlineRules(
        key=AirlineKey.UNITED,
        name="United Airlines",
        iata="UA",
        codes=("UA", "UNITED"),
        flight=_flight(r"UA|United(?:\s+Airlines)?"),
        date=FieldRule(re.compile(rf"\b(\d{{1,2}}{_MONTHS}\d{{2,4}})\b", re.IGNORECASE)),
        route=_route(r"-|→"),
        passenger=FieldRule(
            re.compile(
                rf"name[:\s]*({NAME_CHARS}+)|({NAME_CHARS}+?)\s*-\s*\d+[A-F]\b",
                re.IGNORECASE,
            ),
            passenger_value,
            passenger_seat,
            passenger_labeled,
        ),
        confirmation=_confirmation(r"confirmation|record\s+locator"),
    ),
    AirlineKey.SOUTHWEST: AirlineRules(
        key=AirlineKey.SOUTHWEST,
        name="Southwest Airlines",
        iata="WN",
        codes=("WN", "SOUTHWEST"),
        flight=_flight(r"WN|Southwest(?:\s+Airlines)?"),
        date=_SLASH_DATE,
        route=_route(r"to|TO|→|-"),
        passenger=_passenger(r"passenger(?:\s+name)?"),
        confirmation=_confirmation(r"confirmation"),
    ),
    AirlineKey.JETBLUE: AirlineRules(
        key=AirlineKey.JETBLUE,
        name="JetBlue Airways",
        iata="B6",
        codes=("B6", "JETBLUE"),
        flight=_flight(r"B6|JetBlue(?:\s+Airways)?"),
        date=_SPACED_DATE,
        route=_route(r"to|TO|-"),
        passenger=_passenger(r"passenger(?:\s+name)?"),
        confirmation=_confirmation(r"confirmation"),
    ),
    AirlineKey.SPIRIT: AirlineRules(
        key=AirlineKey.SPIRIT,
        name="Spirit Airlines",
        iata="NK",
        codes=("NK", "SPIRIT"),
        flight=_flight(r"NK|Spirit(?:\s+Airlines)?"),
        date=_SLASH_DATE,
        route=_route(r"to|TO|-"),
        passenger=_passenger(r"passenger(?:\s+name)?"),
        confirmation=_confirmation(r"confirmation"),
    ),
}


def get_rules(key: Optional[AirlineKey]) -> Optional[AirlineRules]:
    if key is None:
        return None
    return AIRLINE_RULES.get(key)
