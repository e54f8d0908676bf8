"""Health score derivation from a pet's recent entries."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Protocol

from lovingpaws.models.health_entry import EntryType, Severity
from lovingpaws.utils import parse_entry_date

MIN_SCORE = 0
MAX_SCORE = 100
RECENT_WINDOW_DAYS = 30

# Points removed per recent symptom, by severity
SEVERITY_PENALTIES = {
    Severity.MILD: 5,
    Severity.MODERATE: 15,
    Severity.SEVERE: 30,
    Severity.EMERGENCY: 50,
}

# Points added per recent medication or appointment
CARE_BONUS = 2
CARE_TYPES = frozenset({EntryType.MEDICATION, EntryType.APPOINTMENT})

# Alternative table used by the analytics report
ANALYTICS_SEVERITY_PENALTIES = {
    Severity.MILD: 5,
    Severity.MODERATE: 15,
    Severity.SEVERE: 25,
    Severity.EMERGENCY: 40,
}


class ScoredEntry(Protocol):
    """Anything with the fields the score reads (ORM rows, schemas)."""

    type: Any
    severity: Any
    date: Any


@dataclass(frozen=True)
class ScoringProfile:
    """Tunable parameters of the score formula."""

    base: int = MAX_SCORE
    penalties: dict[Severity, int] = field(default_factory=lambda: dict(SEVERITY_PENALTIES))
    care_bonus: int = CARE_BONUS
    symptoms_only: bool = True
    window_days: int = RECENT_WINDOW_DAYS
    include_window_start: bool = False


CANONICAL_PROFILE = ScoringProfile()

ANALYTICS_PROFILE = ScoringProfile(
    base=85,
    penalties=dict(ANALYTICS_SEVERITY_PENALTIES),
    care_bonus=0,
    symptoms_only=False,
    include_window_start=True,
)


def _value(member: Any) -> Any:
    return member.value if isinstance(member, EntryType | Severity) else member


def _entry_date(entry: ScoredEntry) -> date | None:
    value = entry.date
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_entry_date(value)
    except ValueError:
        return None


def recent_entries(
    entries: Iterable[ScoredEntry],
    today: date | None = None,
    window_days: int = RECENT_WINDOW_DAYS,
    include_window_start: bool = False,
) -> list[ScoredEntry]:
    """Entries dated within the trailing window ending today.

    Entries with missing or unreadable dates are left out.
    """
    today = today or date.today()
    start = today - timedelta(days=window_days)
    recent = []
    for entry in entries:
        entry_date = _entry_date(entry)
        if entry_date is None:
            continue
        if entry_date > start or (include_window_start and entry_date == start):
            recent.append(entry)
    return recent


def compute_health_score(
    entries: Iterable[ScoredEntry],
    *,
    today: date | None = None,
    profile: ScoringProfile = CANONICAL_PROFILE,
) -> int:
    """Score a pet's recent health history from 0 (poor) to 100 (healthy).

    Starts from the profile base, subtracts a severity penalty for each recent
    symptom, adds a small bonus for each recent medication or appointment, and
    clamps to [0, 100].
    """
    penalties = {severity.value: points for severity, points in profile.penalties.items()}
    care_types = {t.value for t in CARE_TYPES}

    score = profile.base
    for entry in recent_entries(
        entries,
        today=today,
        window_days=profile.window_days,
        include_window_start=profile.include_window_start,
    ):
        entry_type = _value(entry.type)
        severity = _value(entry.severity)

        if severity in penalties and (not profile.symptoms_only or entry_type == "symptom"):
            score -= penalties[severity]
        if entry_type in care_types:
            score += profile.care_bonus

    return max(MIN_SCORE, min(MAX_SCORE, score))


@dataclass
class HealthSummary:
    """Per-pet analytics: entry counts and both score readings."""

    health_score: int
    analytics_score: int
    medications: int
    appointments: int
    symptoms: int
    total_entries: int
    recent_entries: int


def summarize_entries(entries: Iterable[ScoredEntry], today: date | None = None) -> HealthSummary:
    """Build the analytics summary shown for one pet."""
    entries = list(entries)
    counts = Counter(_value(entry.type) for entry in entries)

    return HealthSummary(
        health_score=compute_health_score(entries, today=today),
        analytics_score=compute_health_score(entries, today=today, profile=ANALYTICS_PROFILE),
        medications=counts[EntryType.MEDICATION.value],
        appointments=counts[EntryType.APPOINTMENT.value],
        symptoms=counts[EntryType.SYMPTOM.value],
        total_entries=len(entries),
        recent_entries=len(recent_entries(entries, today=today)),
    )
