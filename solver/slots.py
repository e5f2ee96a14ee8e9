"""Slot-Aufzählung: belegbare (Tag, Stunde)-Zellen pro Klasse."""

from collections import defaultdict
from collections.abc import Container

from config.schema import TimetableConfig
from models.school_class import SchoolClass
from models.timeslot import Slot


def enumerate_slots(
    classes: list[SchoolClass], config: TimetableConfig
) -> dict[int, list[Slot]]:
    """Alle Slots je Klasse, Mittagspause ausgenommen.

    Reihenfolge je Klasse: Tag aufsteigend, dann Stunde aufsteigend.
    """
    by_class: dict[int, list[Slot]] = defaultdict(list)
    for cls in classes:
        for day in range(config.days_per_week):
            for period in range(config.periods_per_day):
                if config.lunch_period is not None and period == config.lunch_period:
                    continue
                by_class[cls.id].append(Slot(day=day, period=period, class_id=cls.id))
    return dict(by_class)


def free_slots(
    class_slots: list[Slot], assigned: Container[tuple[int, int, int]]
) -> list[Slot]:
    """Noch unbelegte Slots, früheste in der Woche zuerst."""
    free = [s for s in class_slots if s.key not in assigned]
    free.sort(key=lambda s: (s.day, s.period))
    return free
