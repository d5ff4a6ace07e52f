# patterns.py
from __future__ import annotations

import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Callable, Optional

_SEAT_IN_NAME = re.compile(r"(\d+[A-F])\b")
_NAME_TAIL = " \t-,.'"

# Labels that end a passenger name when OCR glues the next field onto it
NAME_STOPWORDS = {
    "SEAT", "ROW", "FLIGHT", "GATE", "CLASS", "CABIN", "DATE", "DEPART", "DEPARTS",
    "DEPARTURE", "ARRIVAL", "ARRIVE", "ARRIVES", "FROM", "TO", "CONFIRMATION", "PNR",
    "BOARDING", "ZONE", "GROUP", "TERMINAL", "RECORD", "LOCATOR", "TICKET", "BAGGAGE",
    "NAME", "PASSENGER",
}


def first_group(m: Match[str]) -> Optional[str]:
    for g in m.groups():
        if g:
            return g.strip()
    return None


def flight_value(m: Match[str]) -> Optional[str]:
    """
    "AA 1234" / "AA1234" / "Delta 455" -> "AA1234" / "AA1234" / "Delta455"

    The alphabetic segment in front of the captured number loses whitespace
    and non-word characters and is concatenated with the number.
    """
    idx = m.lastindex
    if not idx or not (m.group(idx) or "").isdigit():
        return re.sub(r"\s+", "", m.group(0)) or None
    number = m.group(idx)
    head = m.string[m.start(0):m.start(idx)]
    head = re.sub(r"[^\w]", "", head.split()[0]) if head.split() else ""
    return f"{head}{number}"


def route_value(m: Match[str]) -> Optional[str]:
    if m.group(1) and m.group(2):
        return f"{m.group(1).upper()}-{m.group(2).upper()}"
    return None


def passenger_labeled(m: Match[str]) -> bool:
    """False when only the unlabeled "NAME - 24A" branch of the rule matched."""
    return m.re.groups < 2 or bool(m.group(1))


def passenger_value(m: Match[str]) -> Optional[str]:
    raw = first_group(m)
    if not raw:
        return None
    kept = []
    for token in raw.split():
        if token.strip(_NAME_TAIL).upper() in NAME_STOPWORDS:
            # "Main Cabin - 23C" is a cabin line, not a name
            if not passenger_labeled(m):
                return None
            break
        kept.append(token)
    name = " ".join(kept).strip(_NAME_TAIL)
    return name if len(name) >= 3 else None


def passenger_seat(m: Match[str]) -> Optional[str]:
    """Seat glued to a name in the "JOHN DOE - 24A" layout."""
    if m.re.groups < 2 or not m.group(2):
        return None
    seat = _SEAT_IN_NAME.search(m.group(0))
    return seat.group(1) if seat else None


@dataclass(frozen=True)
class FieldRule:
    """One regex plus how to turn a match into a field value."""

    pattern: Pattern[str]
    value: Callable[[Match[str]], Optional[str]] = first_group
    seat: Optional[Callable[[Match[str]], Optional[str]]] = None
    labeled: Optional[Callable[[Match[str]], bool]] = None


# Name characters never span lines: OCR puts unrelated labels on the next line
NAME_CHARS = r"[A-Z][A-Z \t',.-]"
NAME_LABEL = r"(?:passenger(?:\s+name)?|name|traveler)"


class Patterns:
    FLIGHT_NO = FieldRule(re.compile(r"\b([A-Z]{2,3})\s*(\d{3,4})\b"), flight_value)
    DATE = FieldRule(
        re.compile(
            r"\b(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}|\d{1,2}\s[A-Z]{3}\s\d{2,4})\b",
            re.IGNORECASE,
        )
    )
    ROUTE = FieldRule(
        re.compile(r"\b([A-Z]{3})\s*(?:to|TO|To|→|-|>)\s*([A-Z]{3})\b"),
        route_value,
    )
    PASSENGER = FieldRule(
        re.compile(
            NAME_LABEL + r"\s*[:\-]?\s*(" + NAME_CHARS + r"{2,})"
            r"|(" + NAME_CHARS + r"{2,}?)\s*-\s*\d+[A-F]\b",
            re.IGNORECASE,
        ),
        passenger_value,
        passenger_seat,
        passenger_labeled,
    )
    CONFIRMATION = FieldRule(
        re.compile(
            r"(?i:confirmation|pnr|record\s+locator)(?:\s+(?i:code|number|no\.?|#))?"
            r"\s*[:\-#]?\s*([A-Z0-9]{4,8})\b"
        )
    )
    TIME = re.compile(r"(?<![\d:])(\d{1,2}:\d{2}(?:\s*[AP]\.?M\.?)?)(?![\d:])", re.IGNORECASE)
    SEAT = re.compile(r"(?i:seat|row)\s*[:\-]?\s*(\d{1,3}[A-Z]?)\b")


patterns = Patterns()
