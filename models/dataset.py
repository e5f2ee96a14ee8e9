"""Dataset: Vollständiger Eingabedatensatz + Machbarkeits-Check (Pydantic v2)."""

from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from config.schema import TimetableConfig
from models.subject import Subject
from models.teacher import Teacher
from models.school_class import SchoolClass
from models.workload import AvailabilitySlot, Capability, WorkloadRequirement


class FeasibilityReport(BaseModel):
    """Ergebnis des Machbarkeits-Checks."""

    is_feasible: bool
    errors: list[str]      # Kritische Probleme (Lösung unmöglich)
    warnings: list[str]    # Hinweise (Lösung schwierig aber möglich)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ KEINE HINDERNISSE GEFUNDEN[/bold green]"
        else:
            status = "[bold red]✗ NICHT LÖSBAR[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Machbarkeits-Check", border_style="cyan"))


class Dataset(BaseModel):
    """Vollständiger Datensatz für einen Solver-Lauf.

    Der Solver liest den Datensatz nur; Änderungen (z.B. Verfügbarkeit
    auffüllen) erzeugen immer eine neue Instanz.
    """

    config: TimetableConfig = Field(default_factory=TimetableConfig)
    teachers: list[Teacher] = []
    subjects: list[Subject] = []
    classes: list[SchoolClass] = []
    workloads: list[WorkloadRequirement] = []
    capabilities: list[Capability] = []
    availability: list[AvailabilitySlot] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Lookups ───

    def teacher_map(self) -> dict[int, Teacher]:
        return {t.id: t for t in self.teachers}

    def subject_map(self) -> dict[int, Subject]:
        return {s.id: s for s in self.subjects}

    def class_map(self) -> dict[int, SchoolClass]:
        return {c.id: c for c in self.classes}

    def capable_teacher_ids(self, subject_id: int) -> list[int]:
        """IDs aller befähigten Lehrkräfte, in Reihenfolge der Lehrerliste."""
        capable = {c.teacher_id for c in self.capabilities if c.subject_id == subject_id}
        return [t.id for t in self.teachers if t.id in capable]

    def available_cells(self) -> set[tuple[int, int, int]]:
        """Alle (teacher_id, day, period) mit explizitem verfügbar-Eintrag."""
        return {
            (a.teacher_id, a.day, a.period)
            for a in self.availability if a.available
        }

    # ─── Verfügbarkeit auffüllen ───

    def with_default_availability(self) -> "Dataset":
        """Ergänzt fehlende Verfügbarkeitseinträge als "verfügbar".

        Für jede Lehrkraft und jede belegbare (Tag, Stunde)-Zelle ohne
        Eintrag wird ein available=True-Eintrag angehängt. Bestehende
        Einträge (auch available=False) bleiben unverändert.
        """
        existing = {(a.teacher_id, a.day, a.period) for a in self.availability}
        added: list[AvailabilitySlot] = []
        for teacher in self.teachers:
            for day in range(self.config.days_per_week):
                for period in self.config.teaching_periods:
                    if (teacher.id, day, period) not in existing:
                        added.append(AvailabilitySlot(
                            teacher_id=teacher.id, day=day, period=period,
                            available=True,
                        ))
        if not added:
            return self
        return self.model_copy(update={"availability": list(self.availability) + added})

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        cfg = self.config
        total_need = sum(w.periods_per_week for w in self.workloads)
        total_cap = sum(t.max_per_week for t in self.teachers)
        slots_per_class = cfg.days_per_week * len(cfg.teaching_periods)
        lines = [
            f"Raster: {cfg.days_per_week} Tage × {cfg.periods_per_day} Stunden"
            + (f" (Mittagspause: Std. {cfg.lunch_period + 1})"
               if cfg.lunch_period is not None else ""),
            f"Belegbare Slots pro Klasse: {slots_per_class}",
            f"Klassen: {len(self.classes)}",
            f"Fächer: {len(self.subjects)}",
            f"Lehrkräfte: {len(self.teachers)}",
            f"Stundenbedarf: {total_need}h/Woche in {len(self.workloads)} Einträgen",
            f"Lehrerkapazität (max_per_week): {total_cap}h/Woche",
        ]
        return "\n".join(lines)

    # ─── Machbarkeits-Check ───

    def validate_feasibility(self) -> FeasibilityReport:
        """Prüft ob der Datensatz grundsätzlich lösbar sein kann.

        Notwendige, nicht hinreichende Bedingungen:
        1. Raster-Grenzen gültig
        2. Stundenbedarf vorhanden, keine verwaisten IDs
        3. Pro Klasse: Bedarf ≤ belegbare Slots
        4. Pro Fach: mindestens eine befähigte Lehrkraft
        5. Pro Fach: Bedarf ≤ Kapazität der befähigten Lehrkräfte
        6. Verfügbarkeit vollständig gepflegt
        """
        errors: list[str] = []
        warnings: list[str] = []
        cfg = self.config

        # ── 1. Raster ─────────────────────────────────────────────────────
        errors.extend(f"Raster: {e}" for e in cfg.validation_errors())
        if errors:
            return FeasibilityReport(is_feasible=False, errors=errors, warnings=warnings)

        teachers = self.teacher_map()
        subjects = self.subject_map()
        classes = self.class_map()

        # ── 2. Bedarf + Referenzen ────────────────────────────────────────
        if not self.workloads:
            errors.append("Kein Stundenbedarf definiert – nichts zu planen.")
        for w in self.workloads:
            if w.class_id not in classes:
                errors.append(f"Stundenbedarf verweist auf unbekannte Klasse {w.class_id}.")
            if w.subject_id not in subjects:
                errors.append(f"Stundenbedarf verweist auf unbekanntes Fach {w.subject_id}.")
        for c in self.capabilities:
            if c.teacher_id not in teachers:
                warnings.append(f"Lehrbefähigung verweist auf unbekannte Lehrkraft {c.teacher_id}.")

        # ── 3. Pro Klasse: Bedarf ≤ Slots ────────────────────────────────
        slots_per_class = cfg.days_per_week * len(cfg.teaching_periods)
        class_need: dict[int, int] = defaultdict(int)
        for w in self.workloads:
            class_need[w.class_id] += w.periods_per_week
        for class_id, need in class_need.items():
            name = classes[class_id].name if class_id in classes else str(class_id)
            if need > slots_per_class:
                errors.append(
                    f"Klasse '{name}': {need}h Bedarf, aber nur {slots_per_class} "
                    f"belegbare Slots pro Woche."
                )

        # ── 4./5. Pro Fach: Lehrkräfte + Kapazität ───────────────────────
        capacity = self._teacher_capacities()
        subject_need: dict[int, int] = defaultdict(int)
        for w in self.workloads:
            subject_need[w.subject_id] += w.periods_per_week
        for subject_id, need in subject_need.items():
            name = subjects[subject_id].name if subject_id in subjects else str(subject_id)
            capable = self.capable_teacher_ids(subject_id)
            if not capable:
                errors.append(
                    f"Fach '{name}': Keine befähigte Lehrkraft! "
                    f"({need}h/Woche werden benötigt)"
                )
                continue
            cap = sum(capacity[t] for t in capable)
            if cap < need:
                errors.append(
                    f"Fach '{name}': Kapazität der befähigten Lehrkräfte ({cap}h) "
                    f"unter Bedarf ({need}h)."
                )
            elif cap < need * 1.10:
                warnings.append(
                    f"Fach '{name}': Auslastung sehr hoch – "
                    f"{need}h Bedarf bei {cap}h Kapazität ({need / cap * 100:.0f}%)."
                )

        total_need = sum(subject_need.values())
        total_cap = sum(capacity.values())
        if self.workloads and total_cap < total_need:
            errors.append(
                f"Gesamtbilanz: Lehrerkapazität ({total_cap}h) < Gesamtbedarf ({total_need}h)."
            )

        # ── 6. Verfügbarkeit ─────────────────────────────────────────────
        existing = {(a.teacher_id, a.day, a.period) for a in self.availability}
        cells_per_teacher = cfg.days_per_week * len(cfg.teaching_periods)
        for teacher in self.teachers:
            missing = sum(
                1 for d in range(cfg.days_per_week) for p in cfg.teaching_periods
                if (teacher.id, d, p) not in existing
            )
            if missing:
                warnings.append(
                    f"Lehrkraft {teacher.code}: {missing}/{cells_per_teacher} Zellen ohne "
                    f"Verfügbarkeitseintrag (gelten als nicht verfügbar)."
                )

        return FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def _teacher_capacities(self) -> dict[int, int]:
        """Erreichbare Wochenstunden je Lehrkraft.

        Pro Tag min(max_per_day, verfügbare Zellen), gedeckelt durch max_per_week.
        """
        cells = self.available_cells()
        capacity: dict[int, int] = {}
        for t in self.teachers:
            per_day = [
                min(t.max_per_day, sum(
                    1 for p in self.config.teaching_periods if (t.id, d, p) in cells
                ))
                for d in range(self.config.days_per_week)
            ]
            capacity[t.id] = min(t.max_per_week, sum(per_day))
        return capacity

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "Dataset":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
