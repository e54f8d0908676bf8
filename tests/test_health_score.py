"""Unit tests for health score calculation."""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Any

import pytest

from lovingpaws.models.health_entry import EntryType, Severity
from lovingpaws.services.health_score import (
    ANALYTICS_PROFILE,
    CANONICAL_PROFILE,
    MAX_SCORE,
    MIN_SCORE,
    compute_health_score,
    recent_entries,
    summarize_entries,
)

TODAY = date(2025, 6, 15)


@dataclass
class Entry:
    type: Any
    severity: Any = None
    date: Any = TODAY


class TestCanonicalScore:
    """Tests for the default score profile."""

    def test_no_entries_is_full_score(self) -> None:
        assert compute_health_score([], today=TODAY) == 100

    def test_severe_symptom_today(self) -> None:
        entries = [Entry("symptom", "Severe")]
        assert compute_health_score(entries, today=TODAY) == 70

    @pytest.mark.parametrize(
        ("severity", "expected"),
        [
            ("Mild", 95),
            ("Moderate", 85),
            ("Severe", 70),
            ("Emergency", 50),
        ],
    )
    def test_penalty_per_severity(self, severity: str, expected: int) -> None:
        assert compute_health_score([Entry("symptom", severity)], today=TODAY) == expected

    def test_accepts_enum_members(self) -> None:
        entries = [Entry(EntryType.SYMPTOM, Severity.MODERATE)]
        assert compute_health_score(entries, today=TODAY) == 85

    def test_symptom_without_severity_costs_nothing(self) -> None:
        assert compute_health_score([Entry("symptom")], today=TODAY) == 100

    def test_severity_on_other_types_is_ignored(self) -> None:
        entries = [Entry("behavior", "Severe"), Entry("vitals", "Emergency")]
        assert compute_health_score(entries, today=TODAY) == 100

    def test_care_bonus_is_clamped(self) -> None:
        """Medications and appointments cannot push the score past 100."""
        entries = [Entry("medication"), Entry("medication"), Entry("appointment")]
        assert compute_health_score(entries, today=TODAY) == 100

    def test_without_care_bonus(self) -> None:
        entries = [Entry("medication"), Entry("medication"), Entry("appointment")]
        no_bonus = replace(CANONICAL_PROFILE, care_bonus=0)
        assert compute_health_score(entries, today=TODAY, profile=no_bonus) == 100

    def test_care_bonus_offsets_penalty(self) -> None:
        entries = [Entry("symptom", "Mild"), Entry("medication"), Entry("appointment")]
        assert compute_health_score(entries, today=TODAY) == 99

    def test_never_below_zero(self) -> None:
        entries = [Entry("symptom", "Emergency") for _ in range(5)]
        assert compute_health_score(entries, today=TODAY) == 0

    def test_old_entries_ignored(self) -> None:
        entries = [Entry("symptom", "Emergency", TODAY - timedelta(days=45))]
        assert compute_health_score(entries, today=TODAY) == 100

    def test_window_start_is_exclusive(self) -> None:
        boundary = [Entry("symptom", "Severe", TODAY - timedelta(days=30))]
        inside = [Entry("symptom", "Severe", TODAY - timedelta(days=29))]

        assert compute_health_score(boundary, today=TODAY) == 100
        assert compute_health_score(inside, today=TODAY) == 70

    def test_string_dates_in_both_formats(self) -> None:
        entries = [
            Entry("symptom", "Mild", "2025-06-10"),
            Entry("symptom", "Mild", "2025/06/11"),
        ]
        assert compute_health_score(entries, today=TODAY) == 90

    def test_unreadable_dates_are_skipped(self) -> None:
        entries = [Entry("symptom", "Severe", "someday"), Entry("symptom", "Severe", None)]
        assert compute_health_score(entries, today=TODAY) == 100


class TestAnalyticsProfile:
    """Tests for the alternative analytics profile."""

    def test_base_score(self) -> None:
        assert compute_health_score([], today=TODAY, profile=ANALYTICS_PROFILE) == 85

    def test_penalties_apply_to_any_type(self) -> None:
        entries = [Entry("behavior", "Severe"), Entry("symptom", "Emergency")]
        assert compute_health_score(entries, today=TODAY, profile=ANALYTICS_PROFILE) == 20

    def test_no_care_bonus(self) -> None:
        entries = [Entry("medication"), Entry("appointment")]
        assert compute_health_score(entries, today=TODAY, profile=ANALYTICS_PROFILE) == 85

    def test_window_start_is_inclusive(self) -> None:
        entries = [Entry("symptom", "Mild", TODAY - timedelta(days=30))]
        assert compute_health_score(entries, today=TODAY, profile=ANALYTICS_PROFILE) == 80


def test_score_always_within_bounds() -> None:
    severities = [None, "Mild", "Moderate", "Severe", "Emergency"]
    types = [t.value for t in EntryType]
    for count in range(0, 12):
        entries = [
            Entry(types[i % len(types)], severities[i % len(severities)], TODAY - timedelta(days=i))
            for i in range(count)
        ]
        for profile in (CANONICAL_PROFILE, ANALYTICS_PROFILE):
            score = compute_health_score(entries, today=TODAY, profile=profile)
            assert isinstance(score, int)
            assert MIN_SCORE <= score <= MAX_SCORE


def test_recent_entries_window() -> None:
    entries = [Entry("symptom", date=TODAY - timedelta(days=d)) for d in (0, 10, 30, 31)]

    assert len(recent_entries(entries, today=TODAY)) == 2
    assert len(recent_entries(entries, today=TODAY, include_window_start=True)) == 3


def test_summarize_entries() -> None:
    entries = [
        Entry("symptom", "Severe"),
        Entry("medication"),
        Entry("medication", date=TODAY - timedelta(days=60)),
        Entry("appointment"),
        Entry("feeding"),
    ]

    summary = summarize_entries(entries, today=TODAY)

    assert summary.health_score == 74
    assert summary.analytics_score == 60
    assert summary.medications == 2
    assert summary.appointments == 1
    assert summary.symptoms == 1
    assert summary.total_entries == 5
    assert summary.recent_entries == 4
