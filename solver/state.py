"""Veränderlicher Suchzustand mit exakt umkehrbaren Platzierungen."""

import copy
from dataclasses import dataclass
from typing import Optional

from models.timeslot import Slot
from solver.demand import Demand

# (day, period, class_id) → (subject_id, teacher_id)
AssignmentMap = dict[tuple[int, int, int], tuple[int, int]]


@dataclass(frozen=True)
class UndoRecord:
    """Alles, was nötig ist, um genau eine Platzierung zurückzunehmen."""

    slot: Slot
    teacher_id: int
    subject_id: int
    demand: Demand
    previous_last_period: Optional[int]


class SearchState:
    """Belegung + Zähler eines einzelnen Solver-Laufs.

    Gehört exklusiv zu einem solve()-Aufruf. Zähler, die auf 0 fallen,
    werden entfernt, damit ein zurückgenommener Zweig den Zustand
    vergleichsgleich hinterlässt.
    """

    def __init__(self) -> None:
        self.assigned: AssignmentMap = {}
        self.day_load: dict[tuple[int, int], int] = {}               # (teacher_id, day)
        self.week_load: dict[int, int] = {}                          # teacher_id
        self.last_period: dict[tuple[int, int, int], int] = {}       # (teacher_id, class_id, day)
        self.busy: dict[tuple[int, int, int], int] = {}              # (teacher_id, day, period)

    # ─── Abfragen ───

    def day_count(self, teacher_id: int, day: int) -> int:
        return self.day_load.get((teacher_id, day), 0)

    def week_count(self, teacher_id: int) -> int:
        return self.week_load.get(teacher_id, 0)

    def is_busy(self, teacher_id: int, day: int, period: int) -> bool:
        """Lehrkraft ist zu (day, period) bereits in irgendeiner Klasse eingeplant."""
        return (teacher_id, day, period) in self.busy

    def last_period_for(self, teacher_id: int, class_id: int, day: int) -> Optional[int]:
        return self.last_period.get((teacher_id, class_id, day))

    # ─── Platzieren / Zurücknehmen ───

    def place(self, slot: Slot, teacher_id: int, demand: Demand) -> UndoRecord:
        """Trägt eine Stunde ein und gibt den passenden UndoRecord zurück."""
        lp_key = (teacher_id, slot.class_id, slot.day)
        record = UndoRecord(
            slot=slot,
            teacher_id=teacher_id,
            subject_id=demand.subject_id,
            demand=demand,
            previous_last_period=self.last_period.get(lp_key),
        )
        self.assigned[slot.key] = (demand.subject_id, teacher_id)
        _inc(self.day_load, (teacher_id, slot.day))
        _inc(self.week_load, teacher_id)
        _inc(self.busy, (teacher_id, slot.day, slot.period))
        self.last_period[lp_key] = slot.period
        demand.remaining -= 1
        return record

    def undo(self, record: UndoRecord) -> None:
        """Nimmt genau die Platzierung von `record` zurück."""
        slot = record.slot
        demand = record.demand
        demand.remaining += 1
        lp_key = (record.teacher_id, slot.class_id, slot.day)
        if record.previous_last_period is None:
            self.last_period.pop(lp_key, None)
        else:
            self.last_period[lp_key] = record.previous_last_period
        _dec(self.busy, (record.teacher_id, slot.day, slot.period))
        _dec(self.week_load, record.teacher_id)
        _dec(self.day_load, (record.teacher_id, slot.day))
        del self.assigned[slot.key]

    def snapshot(self) -> dict:
        """Vergleichbare Kopie des gesamten Zustands (für Tests/Diagnose)."""
        return copy.deepcopy({
            "assigned": self.assigned,
            "day_load": self.day_load,
            "week_load": self.week_load,
            "last_period": self.last_period,
            "busy": self.busy,
        })


def _inc(counter: dict, key) -> None:
    counter[key] = counter.get(key, 0) + 1


def _dec(counter: dict, key) -> None:
    n = counter[key] - 1
    if n:
        counter[key] = n
    else:
        del counter[key]
