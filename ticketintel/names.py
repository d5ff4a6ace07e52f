# names.py
"""
Name normalization and comparison helpers for passenger matching.

Decomposition is a Western first/middle/last heuristic: the first token is
the first name, the last token is the last name and anything between is a
middle name. Non-Western name orders are not detected.
"""

from __future__ import annotations

import re
from typing import Any, List

from .models import NameComponents

HONORIFIC_PREFIXES = ("mr", "mrs", "ms", "dr", "prof", "ex", "extra")
HONORIFIC_SUFFIXES = ("jr", "sr", "ii", "iii", "iv")

_COMMA_RE = re.compile(r",(?=\S)")
_WS_RE = re.compile(r"\s+")
_PREFIX_RE = re.compile(r"^(?:%s)\.?\s+" % "|".join(HONORIFIC_PREFIXES))
_SUFFIX_RE = re.compile(r"[\s,]+(?:%s)\.?$" % "|".join(HONORIFIC_SUFFIXES))
_TOKEN_PUNCT = ",."


def normalize(name: Any) -> str:
    """
    Canonical form used for every name comparison.

    "MR. John  SMITH,Jr" -> "john smith"
    Never raises: anything that is not a decodable string becomes "".
    """
    if name is None:
        return ""
    if isinstance(name, bytes):
        try:
            name = name.decode("utf-8")
        except UnicodeDecodeError:
            return ""
    if not isinstance(name, str):
        return ""

    s = name.lower()
    s = _COMMA_RE.sub(", ", s)
    s = _WS_RE.sub(" ", s).strip()

    # Strip repeatedly so "mr dr john" and "john smith jr iii" settle in one pass
    while True:
        stripped = _SUFFIX_RE.sub("", _PREFIX_RE.sub("", s)).strip(" ,")
        if stripped == s:
            break
        s = stripped
    return s


def decompose(name: Any) -> NameComponents:
    parts = normalize(name).split()
    if not parts:
        return NameComponents()
    if len(parts) == 1:
        return NameComponents(parts=parts, first=parts[0])
    return NameComponents(parts=parts, first=parts[0], last=parts[-1], middle=parts[1:-1])


def _bare(token: str) -> str:
    return token.strip(_TOKEN_PUNCT)


def order_variations(name: Any) -> List[str]:
    """
    Alternative orderings of a name, all in normalized form.

    "smith, john"         -> ["john smith", "john, smith"]
    "john michael smith"  -> ["smith michael john", "smith, john michael"]
    "smith, john michael" -> ["john michael smith", "michael john smith", "michael, smith john"]
    """
    normalized = normalize(name)
    tokens = [t for t in (_bare(p) for p in normalized.replace(",", " ").split()) if t]
    if len(tokens) < 2:
        return []

    candidates: List[str] = []
    if "," in normalized:
        last, _, rest = normalized.partition(",")
        candidates.append(f"{rest.strip()} {last.strip()}")
    candidates.append(" ".join(reversed(tokens)))
    candidates.append(f"{tokens[-1]}, {' '.join(tokens[:-1])}")

    out: List[str] = []
    for c in candidates:
        c = normalize(c)
        if c and c != normalized and c not in out:
            out.append(c)
    return out


def _edge_points(a: str, b: str) -> float:
    if a == b:
        return 3.0
    if a.startswith(b) or b.startswith(a):
        return 2.0
    return 0.0


def _middle_points(a: List[str], b: List[str]) -> float:
    ma = " ".join(_bare(t) for t in a).strip()
    mb = " ".join(_bare(t) for t in b).strip()
    if not ma and not mb:
        return 1.0
    if not ma or not mb:
        return 0.5
    if ma == mb:
        return 1.0
    if ma in mb or mb in ma:
        return 0.7
    # Some credit for having a middle name at all
    return 0.3


def component_similarity(a: NameComponents, b: NameComponents) -> float:
    """
    Weighted first/middle/last agreement in [0, 1].

    First and last names are worth 3 points each (2 for a prefix match) and
    only count when both sides have them; middle names are worth at most 1.
    """
    earned = 0.0
    possible = 0.0

    first_a, first_b = _bare(a.first), _bare(b.first)
    if first_a and first_b:
        possible += 3.0
        earned += _edge_points(first_a, first_b)

    last_a, last_b = _bare(a.last), _bare(b.last)
    if last_a and last_b:
        possible += 3.0
        earned += _edge_points(last_a, last_b)

    if possible == 0:
        return 0.0

    possible += 1.0
    earned += _middle_points(a.middle, b.middle)
    return earned / possible
