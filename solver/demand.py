"""Bedarfs-Warteschlange: pro (Klasse, Fach) die noch offenen Stunden."""

from dataclasses import dataclass

from models.workload import WorkloadRequirement
from solver.errors import NoDemandError


@dataclass
class Demand:
    """Offener Bedarf einer Klasse in einem Fach.

    `remaining` wird während der Suche verändert und beim Zurücksetzen
    exakt wiederhergestellt.
    """

    class_id: int
    subject_id: int
    remaining: int


def build_demand(workloads: list[WorkloadRequirement]) -> list[Demand]:
    """Erzeugt die Bedarfs-Warteschlange, größter Bedarf zuerst.

    sorted() ist stabil: Gleichstände behalten die Eingabereihenfolge.
    """
    if not workloads:
        raise NoDemandError()
    queue = [
        Demand(class_id=w.class_id, subject_id=w.subject_id,
               remaining=w.periods_per_week)
        for w in workloads
    ]
    return sorted(queue, key=lambda d: d.remaining, reverse=True)
