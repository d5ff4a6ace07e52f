# config.py
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


SERVICE_NAME = os.getenv("SERVICE_NAME", "ticketintel")
ENV = os.getenv("APP_ENV", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE: str | None = os.getenv("LOG_FILE") or None

# Field extraction confidences
AIRLINE_RULE_CONFIDENCE: float = _env_float("AIRLINE_RULE_CONFIDENCE", 0.9)
GENERIC_RULE_CONFIDENCE: float = _env_float("GENERIC_RULE_CONFIDENCE", 0.7)
TIME_CONFIDENCE: float = _env_float("TIME_CONFIDENCE", 0.7)
SEAT_CONFIDENCE: float = _env_float("SEAT_CONFIDENCE", 0.8)
AI_FIELD_CONFIDENCE: float = _env_float("AI_FIELD_CONFIDENCE", 0.95)

# Passenger matching policy
NAME_ORDER_CONFIDENCE: float = _env_float("NAME_ORDER_CONFIDENCE", 0.95)
EXTRACTED_HISTORY_CONFIDENCE: float = _env_float("EXTRACTED_HISTORY_CONFIDENCE", 0.9)
COMPONENT_MATCH_THRESHOLD: float = _env_float("COMPONENT_MATCH_THRESHOLD", 0.75)
FUZZY_MATCH_THRESHOLD: float = _env_float("FUZZY_MATCH_THRESHOLD", 0.6)
ENABLE_FUZZY_MATCHING: bool = _env_bool("ENABLE_FUZZY_MATCHING", True)

# Roster store retry knobs
ROSTER_WRITE_ATTEMPTS: int = _env_int("ROSTER_WRITE_ATTEMPTS", 3)
ROSTER_RETRY_WAIT_MIN: float = _env_float("ROSTER_RETRY_WAIT_MIN", 0.1)
ROSTER_RETRY_WAIT_MAX: float = _env_float("ROSTER_RETRY_WAIT_MAX", 2.0)

AUTO_CREATED_BY = "ticket_processing_auto"
FLIGHT_CREATED_BY = os.getenv("FLIGHT_CREATED_BY", "ticket_processing")
