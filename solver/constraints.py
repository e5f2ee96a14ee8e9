"""Zulässigkeitsprüfung für eine einzelne Kandidaten-Platzierung.

Reihenfolge der Regeln (Abbruch bei der ersten Verletzung):
  1. Lehrbefähigung
  2. Verfügbarkeit          (nur wenn honor_availability)
  3. Keine Doppelbelegung   (nur wenn no_double_booking)
  4. Tageslimit             (immer)
  5. Wochenlimit            (immer)
  6. Keine Folgestunde      (nur wenn avoid_consecutive UND Lehrkraft-Flag)

Regel 6 heißt in der Oberfläche "weich", wirkt aber als harter Filter
ohne Ausweichlösung.
"""

from enum import Enum
from typing import Optional

from config.schema import SwitchConfig
from models.dataset import Dataset
from models.teacher import Teacher
from solver.state import SearchState


class Rule(str, Enum):
    CAPABILITY = "capability"
    AVAILABILITY = "availability"
    DOUBLE_BOOKING = "double_booking"
    DAILY_CAP = "daily_cap"
    WEEKLY_CAP = "weekly_cap"
    CONSECUTIVE = "consecutive"


class SearchContext:
    """Unveränderliche Lookups eines Laufs (aus dem Dataset abgeleitet)."""

    def __init__(self, dataset: Dataset) -> None:
        self.teachers: dict[int, Teacher] = dataset.teacher_map()
        self.capabilities: frozenset[tuple[int, int]] = frozenset(
            (c.teacher_id, c.subject_id) for c in dataset.capabilities
        )
        self.available: frozenset[tuple[int, int, int]] = frozenset(
            dataset.available_cells()
        )

    def can_teach(self, teacher_id: int, subject_id: int) -> bool:
        return (teacher_id, subject_id) in self.capabilities


def explain_rejection(
    teacher_id: int,
    day: int,
    period: int,
    class_id: int,
    subject_id: int,
    state: SearchState,
    switches: SwitchConfig,
    context: SearchContext,
) -> Optional[Rule]:
    """Erste verletzte Regel oder None, wenn die Platzierung zulässig ist."""
    teacher = context.teachers.get(teacher_id)
    if teacher is None or not context.can_teach(teacher_id, subject_id):
        return Rule.CAPABILITY

    if switches.honor_availability and (teacher_id, day, period) not in context.available:
        return Rule.AVAILABILITY

    if switches.no_double_booking and state.is_busy(teacher_id, day, period):
        return Rule.DOUBLE_BOOKING

    if state.day_count(teacher_id, day) + 1 > teacher.max_per_day:
        return Rule.DAILY_CAP
    if state.week_count(teacher_id) + 1 > teacher.max_per_week:
        return Rule.WEEKLY_CAP

    if switches.avoid_consecutive and teacher.avoid_consecutive:
        last = state.last_period_for(teacher_id, class_id, day)
        if last is not None and abs(last - period) == 1:
            return Rule.CONSECUTIVE

    return None


def admissible(
    teacher_id: int,
    day: int,
    period: int,
    class_id: int,
    subject_id: int,
    state: SearchState,
    switches: SwitchConfig,
    context: SearchContext,
) -> bool:
    """True wenn die Platzierung alle aktiven Regeln erfüllt. Ohne Seiteneffekte."""
    return explain_rejection(
        teacher_id, day, period, class_id, subject_id, state, switches, context
    ) is None
