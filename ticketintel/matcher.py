# matcher.py
"""
Passenger Matcher: extracted ticket name + roster -> MatchResult.

Strategies run in order and the first one that finds someone wins:

    1. legal_exact            normalized legal name equal          1.0
    2. display_exact          normalized display name equal        1.0
    3. name_order_variation   "Smith, John" vs "John Smith"        0.95
    4. extracted_existing     seen before in extractedNames        0.9
    5. legal/display_component first/middle/last scoring   score >= 0.75
    6. legal/display_fuzzy    rapidfuzz ratio (optional)     score > 0.6

Roster order is the tie-break everywhere: on equal evidence the passenger
listed first wins.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

try:
    from rapidfuzz import fuzz, process  # optional
except Exception:
    fuzz = None
    process = None

from . import config
from .logging_utils import log_event
from .models import MatchResult, MatchType, NameComponents, Passenger
from .names import component_similarity, decompose, normalize, order_variations

logger = logging.getLogger("ticketintel.matcher")

Strategy = Callable[[str, Sequence[Passenger]], Optional[MatchResult]]


def fuzzy_available() -> bool:
    return fuzz is not None and process is not None


class PassengerMatcher:
    def __init__(
        self,
        component_threshold: Optional[float] = None,
        fuzzy_threshold: Optional[float] = None,
        enable_fuzzy: Optional[bool] = None,
    ):
        self.component_threshold = (
            config.COMPONENT_MATCH_THRESHOLD if component_threshold is None else component_threshold
        )
        self.fuzzy_threshold = config.FUZZY_MATCH_THRESHOLD if fuzzy_threshold is None else fuzzy_threshold
        self.enable_fuzzy = config.ENABLE_FUZZY_MATCHING if enable_fuzzy is None else enable_fuzzy

    @property
    def strategies(self) -> List[Tuple[str, Strategy]]:
        chain: List[Tuple[str, Strategy]] = [
            ("legal_exact", self._legal_exact),
            ("display_exact", self._display_exact),
            ("name_order_variation", self._name_order_variation),
            ("extracted_existing", self._extracted_existing),
            ("component", self._component),
        ]
        if self.enable_fuzzy and fuzzy_available():
            chain.append(("fuzzy", self._fuzzy))
        return chain

    def match(self, extracted_name: str, roster: Sequence[Passenger]) -> MatchResult:
        extracted_name = extracted_name if isinstance(extracted_name, str) else normalize(extracted_name)
        target = normalize(extracted_name)
        if not target:
            logger.debug("Empty extracted name after normalization, no match")
            return MatchResult.no_match(extracted_name)

        for label, strategy in self.strategies:
            found = strategy(target, roster)
            if found is not None:
                result = found.model_copy(update={"extracted_name": extracted_name})
                log_event(
                    logger,
                    "passenger_matched",
                    strategy=label,
                    match_type=result.match_type.value,
                    match_confidence=round(result.confidence, 3),
                    passenger_id=result.passenger.id if result.passenger else None,
                )
                return result

        log_event(logger, "passenger_not_matched", roster_size=len(roster))
        return MatchResult.no_match(extracted_name)

    # ---------------- strategies ----------------

    @staticmethod
    def _hit(passenger: Passenger, match_type: MatchType, confidence: float, target: str) -> MatchResult:
        return MatchResult(passenger=passenger, match_type=match_type, confidence=confidence, extracted_name=target)

    def _legal_exact(self, target: str, roster: Sequence[Passenger]) -> Optional[MatchResult]:
        for p in roster:
            if p.legal_name and normalize(p.legal_name) == target:
                return self._hit(p, MatchType.LEGAL_EXACT, 1.0, target)
        return None

    def _display_exact(self, target: str, roster: Sequence[Passenger]) -> Optional[MatchResult]:
        for p in roster:
            if normalize(p.name) == target:
                return self._hit(p, MatchType.DISPLAY_EXACT, 1.0, target)
        return None

    def _name_order_variation(self, target: str, roster: Sequence[Passenger]) -> Optional[MatchResult]:
        variations = order_variations(target)
        if not variations:
            return None
        for p in roster:
            known = {n for n in (normalize(p.legal_name), normalize(p.name)) if n}
            for variation in variations:
                if variation in known:
                    return self._hit(p, MatchType.NAME_ORDER_VARIATION, config.NAME_ORDER_CONFIDENCE, target)
        return None

    def _extracted_existing(self, target: str, roster: Sequence[Passenger]) -> Optional[MatchResult]:
        for p in roster:
            for previous in p.extracted_names:
                if normalize(previous) == target:
                    return self._hit(p, MatchType.EXTRACTED_EXISTING, config.EXTRACTED_HISTORY_CONFIDENCE, target)
        return None

    def _component(self, target: str, roster: Sequence[Passenger]) -> Optional[MatchResult]:
        extracted = decompose(target)
        best: Optional[Passenger] = None
        best_score = 0.0
        best_type = MatchType.LEGAL_COMPONENT

        for p in roster:
            legal = _score(extracted, p.legal_name)
            display = _score(extracted, p.name)
            score = max(legal, display)
            # strictly greater: earlier roster entries keep ties
            if score > best_score:
                best, best_score = p, score
                best_type = MatchType.LEGAL_COMPONENT if legal >= display else MatchType.DISPLAY_COMPONENT

        if best is None or best_score < self.component_threshold:
            logger.debug("Best component score %.3f below threshold %.2f", best_score, self.component_threshold)
            return None
        return self._hit(best, best_type, best_score, target)

    def _fuzzy(self, target: str, roster: Sequence[Passenger]) -> Optional[MatchResult]:
        legal = [(normalize(p.legal_name), p) for p in roster if p.legal_name]
        display = [(normalize(p.name), p) for p in roster]
        for match_type, index in ((MatchType.LEGAL_FUZZY, legal), (MatchType.DISPLAY_FUZZY, display)):
            index = [(n, p) for n, p in index if n]
            if not index:
                continue
            top = process.extractOne(target, [n for n, _ in index], scorer=fuzz.ratio)
            if top is None:
                continue
            _, score, position = top
            similarity = min(score / 100.0, 1.0)
            if similarity > self.fuzzy_threshold:
                return self._hit(index[position][1], match_type, similarity, target)
        return None


def _score(extracted: NameComponents, roster_name: Optional[str]) -> float:
    if not roster_name:
        return 0.0
    other = decompose(roster_name)
    if other.is_empty:
        return 0.0
    return component_similarity(extracted, other)


_default_matcher: Optional[PassengerMatcher] = None


def match_passenger(extracted_name: str, roster: Sequence[Passenger]) -> MatchResult:
    global _default_matcher
    if _default_matcher is None:
        _default_matcher = PassengerMatcher()
    return _default_matcher.match(extracted_name, roster)
