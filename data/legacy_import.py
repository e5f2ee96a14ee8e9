"""Import/Export im JSON-Format der Browser-Oberfläche.

Format (Schlüssel camelCase):

    {
      "cfg": {"periods": 6, "days": 6, "lunchAt": 3, "weekStart": "2025-10-13"},
      "teachers": [{"id", "name", "code", "maxPerDay", "maxPerWeek", "avoidConsec"}],
      "subjects": [{"id", "name", "code"}],
      "classes": [{"id", "name"}],
      "loads": [{"classId", "subjectId", "ppw"}],
      "canTeach": [{"teacherId", "subjectId"}],
      "availability": [{"teacherId", "day", "period", "available"}]
    }

Beim Laden werden fehlende Verfügbarkeitszellen als "verfügbar" ergänzt.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from config.defaults import default_timetable_config
from config.schema import TimetableConfig
from models.dataset import Dataset
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from models.workload import AvailabilitySlot, Capability, WorkloadRequirement


class ImportReport(BaseModel):
    """Bericht über den JSON-Import."""
    warnings: list[str] = []
    teachers_imported: int = 0
    subjects_imported: int = 0
    classes_imported: int = 0
    workloads_imported: int = 0
    availability_added: int = 0

    def print_rich(self) -> None:
        from rich.console import Console
        from rich.panel import Panel
        console = Console()
        lines = [f"[green]Lehrer: {self.teachers_imported}[/green]  "
                 f"[green]Fächer: {self.subjects_imported}[/green]  "
                 f"[green]Klassen: {self.classes_imported}[/green]  "
                 f"[green]Bedarfe: {self.workloads_imported}[/green]"]
        if self.availability_added:
            lines.append(
                f"[dim]{self.availability_added} Verfügbarkeitszellen als "
                f"'verfügbar' ergänzt.[/dim]"
            )
        if self.warnings:
            lines.append("\n[yellow]Warnungen:[/yellow]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        console.print(Panel("\n".join(lines), title="JSON Import", border_style="cyan"))


class LegacyJsonImporter:
    """Liest eine exportierte JSON-Datei der Browser-Oberfläche."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._report = ImportReport()
        self._raw: Optional[dict[str, Any]] = None

    def _parse_json(self) -> None:
        if not self.path.exists():
            raise FileNotFoundError(f"Datei nicht gefunden: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"JSON-Parse-Fehler: {e}")
        if not isinstance(raw, dict):
            raise ValueError("JSON-Wurzel muss ein Objekt sein.")
        self._raw = raw

    def _ensure_parsed(self) -> dict[str, Any]:
        if self._raw is None:
            self._parse_json()
        return self._raw  # type: ignore[return-value]

    def _section(self, key: str) -> list[dict]:
        value = self._ensure_parsed().get(key) or []
        if not isinstance(value, list):
            self._report.warnings.append(f"'{key}' ist keine Liste, ignoriert.")
            return []
        return [v for v in value if isinstance(v, dict)]

    def import_config(self) -> TimetableConfig:
        """Importiert das Raster aus "cfg" (fehlende Werte: Standard)."""
        cfg = self._ensure_parsed().get("cfg") or {}
        default = default_timetable_config()
        lunch = cfg.get("lunchAt", default.lunch_period)
        if lunch is not None:
            try:
                lunch = int(lunch)
            except (TypeError, ValueError):
                self._report.warnings.append(
                    f"lunchAt '{lunch}' ist keine Zahl, Standard verwendet."
                )
                lunch = default.lunch_period
            else:
                if lunch < 0:
                    lunch = None
        week_start = default.week_start
        if cfg.get("weekStart"):
            try:
                week_start = date.fromisoformat(cfg["weekStart"])
            except ValueError:
                self._report.warnings.append(
                    f"weekStart '{cfg['weekStart']}' ist kein ISO-Datum, ignoriert."
                )
        return default.model_copy(update={
            "periods_per_day": int(cfg.get("periods", default.periods_per_day)),
            "days_per_week": int(cfg.get("days", default.days_per_week)),
            "lunch_period": lunch,
            "week_start": week_start,
        })

    def import_teachers(self) -> list[Teacher]:
        teachers = []
        for el in self._section("teachers"):
            try:
                teachers.append(Teacher(
                    id=el["id"],
                    name=el.get("name", ""),
                    code=el.get("code", ""),
                    max_per_day=el.get("maxPerDay", 4),
                    max_per_week=el.get("maxPerWeek", 18),
                    avoid_consecutive=bool(el.get("avoidConsec", False)),
                ))
            except (KeyError, ValidationError) as e:
                self._report.warnings.append(f"Lehrkraft übersprungen ({el}): {e}")
        self._report.teachers_imported = len(teachers)
        return teachers

    def import_subjects(self) -> list[Subject]:
        subjects = []
        for el in self._section("subjects"):
            try:
                subjects.append(Subject(
                    id=el["id"], name=el.get("name", ""), code=el.get("code", ""),
                ))
            except (KeyError, ValidationError) as e:
                self._report.warnings.append(f"Fach übersprungen ({el}): {e}")
        self._report.subjects_imported = len(subjects)
        return subjects

    def import_classes(self) -> list[SchoolClass]:
        classes = []
        for el in self._section("classes"):
            try:
                classes.append(SchoolClass(id=el["id"], name=el.get("name", "")))
            except (KeyError, ValidationError) as e:
                self._report.warnings.append(f"Klasse übersprungen ({el}): {e}")
        self._report.classes_imported = len(classes)
        return classes

    def import_workloads(self) -> list[WorkloadRequirement]:
        """Importiert "loads"; doppelte (Klasse, Fach)-Einträge werden summiert."""
        merged: dict[tuple[int, int], int] = {}
        for el in self._section("loads"):
            try:
                key = (int(el["classId"]), int(el["subjectId"]))
                ppw = int(el["ppw"])
            except (KeyError, TypeError, ValueError):
                self._report.warnings.append(f"Bedarf übersprungen: {el}")
                continue
            if ppw <= 0:
                self._report.warnings.append(f"Bedarf mit {ppw}h übersprungen: {el}")
                continue
            if key in merged:
                self._report.warnings.append(
                    f"Bedarf Klasse {key[0]} / Fach {key[1]} doppelt, Stunden addiert."
                )
            merged[key] = merged.get(key, 0) + ppw
        workloads = [
            WorkloadRequirement(class_id=c, subject_id=s, periods_per_week=ppw)
            for (c, s), ppw in merged.items()
        ]
        self._report.workloads_imported = len(workloads)
        return workloads

    def import_capabilities(self) -> list[Capability]:
        seen: set[tuple[int, int]] = set()
        capabilities = []
        for el in self._section("canTeach"):
            try:
                key = (int(el["teacherId"]), int(el["subjectId"]))
            except (KeyError, TypeError, ValueError):
                self._report.warnings.append(f"Lehrbefähigung übersprungen: {el}")
                continue
            if key in seen:
                continue
            seen.add(key)
            capabilities.append(Capability(teacher_id=key[0], subject_id=key[1]))
        return capabilities

    def import_availability(self) -> list[AvailabilitySlot]:
        slots = []
        for el in self._section("availability"):
            try:
                slots.append(AvailabilitySlot(
                    teacher_id=el["teacherId"],
                    day=el["day"],
                    period=el["period"],
                    available=bool(el.get("available", True)),
                ))
            except (KeyError, ValidationError):
                self._report.warnings.append(f"Verfügbarkeit übersprungen: {el}")
        return slots

    def import_all(self) -> "tuple[Dataset, ImportReport]":
        """Importiert alle Daten und gibt Dataset + ImportReport zurück."""
        dataset = Dataset(
            config=self.import_config(),
            teachers=self.import_teachers(),
            subjects=self.import_subjects(),
            classes=self.import_classes(),
            workloads=self.import_workloads(),
            capabilities=self.import_capabilities(),
            availability=self.import_availability(),
        )
        before = len(dataset.availability)
        dataset = dataset.with_default_availability()
        self._report.availability_added = len(dataset.availability) - before
        return dataset, self._report


def import_legacy_json(path: Path) -> "tuple[Dataset, ImportReport]":
    """Top-Level Funktion: Browser-JSON → Dataset."""
    return LegacyJsonImporter(path).import_all()


def export_legacy_json(dataset: Dataset, path: Path) -> Path:
    """Schreibt einen Datensatz im JSON-Format der Browser-Oberfläche."""
    cfg = dataset.config
    raw = {
        "cfg": {
            "periods": cfg.periods_per_day,
            "days": cfg.days_per_week,
            "lunchAt": cfg.lunch_period,
            "weekStart": cfg.week_start.isoformat() if cfg.week_start else None,
        },
        "teachers": [
            {
                "id": t.id, "name": t.name, "code": t.code,
                "maxPerDay": t.max_per_day, "maxPerWeek": t.max_per_week,
                "avoidConsec": t.avoid_consecutive,
            }
            for t in dataset.teachers
        ],
        "subjects": [{"id": s.id, "name": s.name, "code": s.code} for s in dataset.subjects],
        "classes": [{"id": c.id, "name": c.name} for c in dataset.classes],
        "loads": [
            {"classId": w.class_id, "subjectId": w.subject_id, "ppw": w.periods_per_week}
            for w in dataset.workloads
        ],
        "canTeach": [
            {"teacherId": c.teacher_id, "subjectId": c.subject_id}
            for c in dataset.capabilities
        ],
        "availability": [
            {"teacherId": a.teacher_id, "day": a.day, "period": a.period,
             "available": a.available}
            for a in dataset.availability
        ],
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(raw, f, indent=2, ensure_ascii=False)
    return path
