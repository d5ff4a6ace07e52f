# extractor.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import config
from .airlines import AIRLINE_RULES, AirlineKey
from .models import FieldCandidate, FieldSource
from .patterns import FieldRule

logger = logging.getLogger("ticketintel.extractor")


def detect_airline(text: str) -> Optional[AirlineKey]:
    """First registry airline whose identifier occurs anywhere in the text."""
    upper = (text or "").upper()
    for key, rules in AIRLINE_RULES.items():
        for code in rules.codes:
            if code in upper:
                logger.debug("Detected airline %s via %r", rules.name, code)
                return key
    logger.debug("No specific airline detected, using generic patterns")
    return None


def _dedupe_key(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip().casefold()


@dataclass
class FieldExtraction:
    candidates: List[FieldCandidate] = field(default_factory=list)
    seats: List[str] = field(default_factory=list)
    unlabeled: set = field(default_factory=set)

    @property
    def best(self) -> Optional[FieldCandidate]:
        return self.candidates[0] if self.candidates else None

    @property
    def labeled(self) -> List[FieldCandidate]:
        """Candidates that came from a match carrying a field label."""
        return [c for c in self.candidates if _dedupe_key(c.value) not in self.unlabeled]


def _apply(
    rule: FieldRule,
    text: str,
    source: FieldSource,
    confidence: float,
    out: FieldExtraction,
    seen: set,
    *,
    first_only: bool,
) -> None:
    matches = [rule.pattern.search(text)] if first_only else list(rule.pattern.finditer(text))
    for m in matches:
        if m is None:
            continue
        value = rule.value(m)
        if not value:
            continue
        key = _dedupe_key(value)
        if key in seen:
            continue
        seen.add(key)
        if rule.labeled is not None and not rule.labeled(m):
            out.unlabeled.add(key)
        out.candidates.append(FieldCandidate(value=value, confidence=confidence, source=source))
        if rule.seat is not None:
            seat = rule.seat(m)
            if seat and seat not in out.seats:
                out.seats.append(seat)


def collect_field(
    text: str,
    airline_rule: Optional[FieldRule],
    generic_rule: FieldRule,
    *,
    airline_confidence: Optional[float] = None,
    generic_confidence: Optional[float] = None,
) -> FieldExtraction:
    """
    Airline rule first (its first match), then every generic match.
    Generic values equal to an already-found value are dropped; the result is
    ordered by descending confidence, first-seen order breaking ties.
    """
    out = FieldExtraction()
    seen: set = set()
    text = text or ""

    if airline_rule is not None:
        _apply(
            airline_rule,
            text,
            FieldSource.AIRLINE_SPECIFIC,
            config.AIRLINE_RULE_CONFIDENCE if airline_confidence is None else airline_confidence,
            out,
            seen,
            first_only=True,
        )
    _apply(
        generic_rule,
        text,
        FieldSource.GENERIC,
        config.GENERIC_RULE_CONFIDENCE if generic_confidence is None else generic_confidence,
        out,
        seen,
        first_only=False,
    )

    out.candidates.sort(key=lambda c: -c.confidence)
    return out


def extract_field(
    text: str,
    airline_rule: Optional[FieldRule],
    generic_rule: FieldRule,
) -> List[FieldCandidate]:
    return collect_field(text, airline_rule, generic_rule).candidates


def extract_passenger_names(
    text: str,
    airline_rule: Optional[FieldRule],
    generic_rule: FieldRule,
) -> Tuple[List[FieldCandidate], List[str]]:
    """Name candidates plus any seats found glued to a name ("JOHN DOE - 24A")."""
    found = collect_field(text, airline_rule, generic_rule)
    return found.candidates, found.seats
