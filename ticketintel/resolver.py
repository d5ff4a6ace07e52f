# resolver.py
"""
Passenger Resolver: match an extracted name against the roster, then either
remember the raw extraction on the matched passenger or create a new one.

The store only offers "read everything" and "replace everything", so every
read-decide-write cycle runs under the resolver's lock. Share one resolver
per store; a batch of names costs one read and at most one write.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Tuple

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from . import config
from .logging_utils import log_event
from .matcher import PassengerMatcher
from .models import MatchType, Passenger, ResolvedPassenger, RosterStoreUnavailable, utcnow

logger = logging.getLogger("ticketintel.resolver")


class RosterStore(Protocol):
    def read_passengers(self) -> List[Passenger]:
        ...

    def write_passengers(self, passengers: List[Passenger]) -> None:
        ...


class InMemoryRosterStore:
    """Roster held in process memory. Hands out and keeps deep copies."""

    def __init__(self, passengers: Optional[Iterable] = None):
        self._passengers: List[Passenger] = [_as_passenger(p) for p in (passengers or [])]
        self.reads = 0
        self.writes = 0

    def read_passengers(self) -> List[Passenger]:
        self.reads += 1
        return [p.model_copy(deep=True) for p in self._passengers]

    def write_passengers(self, passengers: List[Passenger]) -> None:
        self.writes += 1
        self._passengers = [p.model_copy(deep=True) for p in passengers]

    @property
    def passengers(self) -> List[Passenger]:
        return [p.model_copy(deep=True) for p in self._passengers]


def _as_passenger(value) -> Passenger:
    if isinstance(value, Passenger):
        return value.model_copy(deep=True)
    return Passenger.model_validate(value)


def new_passenger_from_ticket(extracted_name: str, now: Optional[datetime] = None) -> Passenger:
    name = extracted_name.strip()
    now = now or utcnow()
    return Passenger(
        id=str(uuid.uuid4()),
        name=name,
        legal_name=name,
        extracted_names=[name],
        created_at=now,
        updated_at=now,
        created_by=config.AUTO_CREATED_BY,
    )


def _locate(roster: List[Passenger], passenger: Passenger) -> Passenger:
    for p in roster:
        if p is passenger:
            return p
    for p in roster:
        if p.id == passenger.id:
            return p
    raise LookupError(f"Matched passenger {passenger.id} is not in the roster")


def resolve_in_roster(
    extracted_name: str,
    roster: List[Passenger],
    matcher: Optional[PassengerMatcher] = None,
    now: Optional[datetime] = None,
) -> Tuple[ResolvedPassenger, bool]:
    """
    Resolve one name against an in-memory roster, mutating it in place.

    Returns the resolution and whether the roster changed (new passenger or a
    new entry in someone's extraction history).
    """
    if not isinstance(extracted_name, str) or not extracted_name.strip():
        raise ValueError("extracted_name must be a non-empty string")

    matcher = matcher or PassengerMatcher()
    match = matcher.match(extracted_name, roster)

    if match.passenger is not None:
        passenger = _locate(roster, match.passenger)
        changed = False
        if match.match_type != MatchType.EXTRACTED_EXISTING:
            changed = passenger.add_extracted_name(extracted_name, now=now)
        return ResolvedPassenger(passenger=passenger, created=False, match=match), changed

    passenger = new_passenger_from_ticket(extracted_name, now)
    roster.append(passenger)
    log_event(logger, "passenger_auto_created", passenger_id=passenger.id)
    return ResolvedPassenger(passenger=passenger, created=True, match=match), True


class PassengerResolver:
    def __init__(self, store: RosterStore, matcher: Optional[PassengerMatcher] = None):
        self.store = store
        self.matcher = matcher or PassengerMatcher()
        self._lock = threading.Lock()

    def resolve(self, extracted_name: str) -> ResolvedPassenger:
        return self.resolve_many([extracted_name])[0]

    def resolve_many(self, extracted_names: Iterable[str]) -> List[ResolvedPassenger]:
        names = list(extracted_names)
        for n in names:
            if not isinstance(n, str) or not n.strip():
                raise ValueError("extracted names must be non-empty strings")
        if not names:
            return []

        with self._lock:
            roster = self.store.read_passengers()
            now = utcnow()
            results: List[ResolvedPassenger] = []
            dirty = False
            for n in names:
                resolved, changed = resolve_in_roster(n, roster, self.matcher, now=now)
                results.append(resolved)
                dirty = dirty or changed
            if dirty:
                self._write(roster)

        log_event(
            logger,
            "passengers_resolved",
            names=len(names),
            created=sum(1 for r in results if r.created),
            matched=sum(1 for r in results if not r.created),
            roster_written=dirty,
            roster_size=len(roster),
        )
        return results

    @retry(
        stop=stop_after_attempt(config.ROSTER_WRITE_ATTEMPTS),
        wait=wait_exponential(
            multiplier=config.ROSTER_RETRY_WAIT_MIN,
            min=config.ROSTER_RETRY_WAIT_MIN,
            max=config.ROSTER_RETRY_WAIT_MAX,
        ),
        retry=retry_if_exception_type(RosterStoreUnavailable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _write(self, roster: List[Passenger]) -> None:
        self.store.write_passengers(roster)
