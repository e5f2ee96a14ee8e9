"""Ergebnis-Modelle und Umwandlung der Belegung in Ausgabezeilen."""

from pathlib import Path

from pydantic import BaseModel

from config.schema import SwitchConfig, TimetableConfig
from models.dataset import Dataset
from solver.state import AssignmentMap

UNKNOWN_NAME = "?"


class ScheduleEntry(BaseModel):
    """Eine einzelne Unterrichtsstunde im fertigen Stundenplan."""

    day: int              # 0-basiert (0=Mo)
    period: int           # 0-basiert (wie Raster)
    class_name: str
    subject_name: str
    teacher_name: str
    class_id: int
    subject_id: int
    teacher_id: int


class ScheduleSolution(BaseModel):
    """Vollständige Lösung eines Solver-Laufs."""

    entries: list[ScheduleEntry]
    solver_status: str = "SOLVED"
    steps: int = 0
    solve_time_seconds: float = 0.0
    switches: SwitchConfig
    config_snapshot: TimetableConfig

    def get_class_schedule(self, class_id: int) -> list[ScheduleEntry]:
        """Alle Einträge für eine bestimmte Klasse."""
        return [e for e in self.entries if e.class_id == class_id]

    def get_teacher_schedule(self, teacher_id: int) -> list[ScheduleEntry]:
        """Alle Einträge für eine bestimmte Lehrkraft."""
        return [e for e in self.entries if e.teacher_id == teacher_id]

    def sorted_entries(self) -> list[ScheduleEntry]:
        """Einträge in Anzeige-Reihenfolge (Klasse, Tag, Stunde)."""
        return sorted(self.entries, key=lambda e: (e.class_name, e.day, e.period))

    def save_json(self, path: Path) -> None:
        """Speichert die Lösung als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "ScheduleSolution":
        """Lädt eine gespeicherte Lösung aus JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Lösung nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())


def build_rows(assigned: AssignmentMap, dataset: Dataset) -> list[ScheduleEntry]:
    """Wandelt die Belegung in Zeilen mit aufgelösten Namen um.

    Reihenfolge = Iterationsreihenfolge der Belegung; für eine stabile
    Anzeige sortiert der Aufrufer selbst (siehe sorted_entries()).
    """
    class_names = {c.id: c.name for c in dataset.classes}
    subject_names = {s.id: s.name for s in dataset.subjects}
    teacher_names = {t.id: t.name for t in dataset.teachers}

    rows: list[ScheduleEntry] = []
    for (day, period, class_id), (subject_id, teacher_id) in assigned.items():
        rows.append(ScheduleEntry(
            day=day,
            period=period,
            class_name=class_names.get(class_id, UNKNOWN_NAME),
            subject_name=subject_names.get(subject_id, UNKNOWN_NAME),
            teacher_name=teacher_names.get(teacher_id, UNKNOWN_NAME),
            class_id=class_id,
            subject_id=subject_id,
            teacher_id=teacher_id,
        ))
    return rows
