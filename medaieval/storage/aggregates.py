"""
Analytics over attempts and activity, shared by every repository backend.

Accuracy values are percentages: each attempt's score is read on the scale
it was recorded with, so attempts scored by different providers can be
averaged together.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from statistics import mean
from typing import Iterable, Mapping, Optional

from medaieval.models import (
    ActivityLogEntry,
    ActivityType,
    Attempt,
    DayActivity,
    Difficulty,
    DifficultyPerformance,
    ProgressPoint,
    Specialty,
    SpecialtyPerformance,
    StoredQuestion,
    UserStats,
)

DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
DIFFICULTY_ORDER = [d.value for d in Difficulty]


def _accuracy(attempts: list[Attempt]) -> float:
    return round(mean(a.percent for a in attempts), 1) if attempts else 0.0


def day_name(ts: datetime) -> str:
    # datetime.weekday() is Monday=0; the week here starts on Sunday
    return DAYS_OF_WEEK[(ts.weekday() + 1) % 7]


def performance_by_specialty(
    attempts: Iterable[Attempt],
    questions: Mapping[int, StoredQuestion],
    specialties: Iterable[Specialty],
) -> list[SpecialtyPerformance]:
    by_id = {s.id: s for s in specialties}
    groups: dict[int, list[Attempt]] = {sid: [] for sid in by_id}
    for attempt in attempts:
        question = questions.get(attempt.question_id)
        if question is None or question.specialty_id not in groups:
            continue
        groups[question.specialty_id].append(attempt)

    rows = [
        SpecialtyPerformance(name=by_id[sid].name, questions=len(group), accuracy=_accuracy(group))
        for sid, group in groups.items()
    ]
    rows.sort(key=lambda r: (-r.accuracy, -r.questions, r.name))
    return rows


def performance_by_difficulty(
    attempts: Iterable[Attempt], questions: Mapping[int, StoredQuestion]
) -> list[DifficultyPerformance]:
    groups: dict[str, list[Attempt]] = {d: [] for d in DIFFICULTY_ORDER}
    for attempt in attempts:
        question = questions.get(attempt.question_id)
        if question is None:
            continue
        groups.setdefault(question.difficulty, []).append(attempt)

    extra = sorted(d for d in groups if d not in DIFFICULTY_ORDER)
    return [
        DifficultyPerformance(name=d, questions=len(groups[d]), accuracy=_accuracy(groups[d]))
        for d in DIFFICULTY_ORDER + extra
    ]


def progress_over_time(
    attempts: Iterable[Attempt], days: int = 30, now: Optional[datetime] = None
) -> list[ProgressPoint]:
    now = now or datetime.utcnow()
    today = now.date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    groups: dict[str, list[Attempt]] = {d.isoformat(): [] for d in window}
    for attempt in attempts:
        key = attempt.created_at.date().isoformat()
        if key in groups:
            groups[key].append(attempt)

    return [
        ProgressPoint(date=key, questions_attempted=len(group), accuracy=_accuracy(group))
        for key, group in groups.items()
    ]


def weekly_activity(entries: Iterable[ActivityLogEntry], now: Optional[datetime] = None) -> list[DayActivity]:
    now = now or datetime.utcnow()
    start = now - timedelta(days=7)
    questions = {d: 0 for d in DAYS_OF_WEEK}
    minutes = {d: 0 for d in DAYS_OF_WEEK}
    for entry in entries:
        if entry.created_at < start:
            continue
        day = day_name(entry.created_at)
        questions[day] += 1
        if entry.type == ActivityType.practice:
            minutes[day] += entry.duration or 0

    return [DayActivity(day=d, questions=questions[d], minutes=minutes[d]) for d in DAYS_OF_WEEK]


def compute_user_stats(
    user_id: int,
    attempts: list[Attempt],
    questions: Mapping[int, StoredQuestion],
    specialties: Iterable[Specialty],
    now: Optional[datetime] = None,
) -> UserStats:
    now = now or datetime.utcnow()
    this_week = [a for a in attempts if a.created_at >= now - timedelta(days=7)]
    last_week = [a for a in attempts if now - timedelta(days=14) <= a.created_at < now - timedelta(days=7)]

    accuracy_change = 0
    if this_week and last_week:
        accuracy_change = round(_accuracy(this_week) - _accuracy(last_week))

    ranked = [row for row in performance_by_specialty(attempts, questions, specialties) if row.questions]
    strongest = ranked[0] if ranked else None
    weakest = ranked[-1] if ranked else None

    return UserStats(
        user_id=user_id,
        questions_answered=len(attempts),
        accuracy_rate=round(_accuracy(attempts)),
        questions_weekly_change=len(this_week) - len(last_week),
        accuracy_weekly_change=accuracy_change,
        strongest_area=strongest.name if strongest else None,
        strongest_area_accuracy=round(strongest.accuracy) if strongest else 0,
        weakest_area=weakest.name if weakest else None,
        weakest_area_accuracy=round(weakest.accuracy) if weakest else 0,
        active_days=len({a.created_at.date() for a in attempts}),
        updated_at=now,
    )
