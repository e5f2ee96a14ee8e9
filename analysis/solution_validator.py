"""Post-Solve Validierung der fertigen Stundenpläne.

Prüft die fertige Lösung auf Regelverletzungen als Sicherheitsnetz
unabhängig vom Solver.
"""

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel

from models.dataset import Dataset
from solver.result import ScheduleSolution


class ValidationViolation(BaseModel):
    """Eine einzelne Regelverletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "teacher_double_booking"
    description: str
    entity: str          # Lehrkraft / Klasse


class ValidationReport(BaseModel):
    """Ergebnis der Post-Solve Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def by_constraint(self, constraint: str) -> list[ValidationViolation]:
        return [v for v in self.violations if v.constraint == constraint]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Lösung-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=26)
        table.add_column("Entität", width=14)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class SolutionValidator:
    """Prüft eine fertige ScheduleSolution gegen den Datensatz.

    Welche Regeln als Fehler gelten, richtet sich nach den Schaltern,
    mit denen die Lösung erzeugt wurde (solution.switches). Tages- und
    Wochenlimits gelten immer.
    """

    def validate(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> ValidationReport:
        """Führt alle Validierungschecks durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []

        violations.extend(self._check_grid_bounds(solution, dataset))
        violations.extend(self._check_class_double_booking(solution))
        violations.extend(self._check_teacher_double_booking(solution))
        violations.extend(self._check_workload_fulfillment(solution, dataset))
        violations.extend(self._check_capabilities(solution, dataset))
        violations.extend(self._check_load_caps(solution, dataset))
        violations.extend(self._check_availability(solution, dataset))
        violations.extend(self._check_consecutive(solution, dataset))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_grid_bounds(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> list[ValidationViolation]:
        """Jeder Eintrag liegt im Raster und nie in der Mittagspause."""
        violations: list[ValidationViolation] = []
        cfg = dataset.config
        for e in solution.entries:
            if not (0 <= e.day < cfg.days_per_week and 0 <= e.period < cfg.periods_per_day):
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="outside_grid",
                    entity=e.class_name,
                    description=f"Tag {e.day+1}, Std. {e.period+1} liegt außerhalb des Rasters.",
                ))
            elif cfg.lunch_period is not None and e.period == cfg.lunch_period:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="lunch_period_used",
                    entity=e.class_name,
                    description=f"Tag {e.day+1}: {e.subject_name} in der Mittagspause.",
                ))
        return violations

    def _check_class_double_booking(
        self, solution: ScheduleSolution
    ) -> list[ValidationViolation]:
        """Eine Klasse hat pro (Tag, Stunde) höchstens einen Eintrag."""
        violations: list[ValidationViolation] = []
        by_slot: dict[tuple, list[str]] = defaultdict(list)
        names: dict[int, str] = {}
        for e in solution.entries:
            by_slot[(e.class_id, e.day, e.period)].append(e.subject_name)
            names[e.class_id] = e.class_name

        for (class_id, day, period), subjects in by_slot.items():
            if len(subjects) > 1:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="class_double_booking",
                    entity=names[class_id],
                    description=(
                        f"Tag {day+1}, Std. {period+1}: mehrere Einträge "
                        f"({', '.join(subjects)})."
                    ),
                ))
        return violations

    def _check_teacher_double_booking(
        self, solution: ScheduleSolution
    ) -> list[ValidationViolation]:
        """Keine Lehrkraft zur selben Zeit in zwei Klassen (falls Schalter aktiv)."""
        violations: list[ValidationViolation] = []
        seen: dict[tuple, list[str]] = defaultdict(list)
        names: dict[int, str] = {}
        for e in solution.entries:
            seen[(e.teacher_id, e.day, e.period)].append(e.class_name)
            names[e.teacher_id] = e.teacher_name

        severity = "error" if solution.switches.no_double_booking else "warning"
        for (teacher_id, day, period), classes in seen.items():
            if len(classes) > 1:
                violations.append(ValidationViolation(
                    severity=severity,
                    constraint="teacher_double_booking",
                    entity=names[teacher_id],
                    description=(
                        f"Tag {day+1}, Std. {period+1}: gleichzeitig in "
                        f"{', '.join(classes)} eingeplant."
                    ),
                ))
        return violations

    def _check_workload_fulfillment(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> list[ValidationViolation]:
        """Pro (Klasse, Fach) exakt die geforderten Wochenstunden."""
        violations: list[ValidationViolation] = []
        class_names = {c.id: c.name for c in dataset.classes}
        subject_names = {s.id: s.name for s in dataset.subjects}

        actual: dict[tuple[int, int], int] = defaultdict(int)
        for e in solution.entries:
            actual[(e.class_id, e.subject_id)] += 1

        expected = {(w.class_id, w.subject_id): w.periods_per_week for w in dataset.workloads}

        for (class_id, subject_id), hours in expected.items():
            got = actual.get((class_id, subject_id), 0)
            if got != hours:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="workload_mismatch",
                    entity=class_names.get(class_id, str(class_id)),
                    description=(
                        f"Fach {subject_names.get(subject_id, subject_id)}: "
                        f"Soll {hours}h, Ist {got}h (Differenz {got - hours:+d}h)."
                    ),
                ))

        for (class_id, subject_id), got in actual.items():
            if (class_id, subject_id) not in expected:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="workload_unexpected",
                    entity=class_names.get(class_id, str(class_id)),
                    description=(
                        f"Fach {subject_names.get(subject_id, subject_id)}: "
                        f"{got}h eingeplant ohne Stundenbedarf."
                    ),
                ))
        return violations

    def _check_capabilities(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> list[ValidationViolation]:
        """Jede Stunde wird von einer befähigten Lehrkraft gegeben."""
        capable = {(c.teacher_id, c.subject_id) for c in dataset.capabilities}
        return [
            ValidationViolation(
                severity="error",
                constraint="capability_missing",
                entity=e.teacher_name,
                description=f"Unterrichtet {e.subject_name} ohne Lehrbefähigung.",
            )
            for e in solution.entries
            if (e.teacher_id, e.subject_id) not in capable
        ]

    def _check_load_caps(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> list[ValidationViolation]:
        """max_per_day und max_per_week gelten unabhängig von den Schaltern."""
        violations: list[ValidationViolation] = []
        per_day: dict[tuple[int, int], int] = defaultdict(int)
        per_week: dict[int, int] = defaultdict(int)
        for e in solution.entries:
            per_day[(e.teacher_id, e.day)] += 1
            per_week[e.teacher_id] += 1

        for teacher in dataset.teachers:
            for day in range(dataset.config.days_per_week):
                n = per_day.get((teacher.id, day), 0)
                if n > teacher.max_per_day:
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint="daily_cap_exceeded",
                        entity=teacher.name,
                        description=f"Tag {day+1}: {n}h > Max {teacher.max_per_day}h.",
                    ))
            n = per_week.get(teacher.id, 0)
            if n > teacher.max_per_week:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="weekly_cap_exceeded",
                    entity=teacher.name,
                    description=f"Woche: {n}h > Max {teacher.max_per_week}h.",
                ))
        return violations

    def _check_availability(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> list[ValidationViolation]:
        """Keine Stunde in einer nicht verfügbaren Zelle (falls Schalter aktiv)."""
        if not solution.switches.honor_availability:
            return []
        available = dataset.available_cells()
        return [
            ValidationViolation(
                severity="error",
                constraint="unavailable_slot_violation",
                entity=e.teacher_name,
                description=(
                    f"Tag {e.day+1}, Std. {e.period+1} ist nicht verfügbar, "
                    f"aber {e.subject_name} für {e.class_name} eingeplant."
                ),
            )
            for e in solution.entries
            if (e.teacher_id, e.day, e.period) not in available
        ]

    def _check_consecutive(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> list[ValidationViolation]:
        """Benachbarte Stunden derselben Lehrkraft in derselben Klasse.

        Der Solver vergleicht nur mit der zuletzt platzierten Stunde; solche
        Paare sind daher möglich und werden als Warnung gemeldet.
        """
        if not solution.switches.avoid_consecutive:
            return []
        flagged = {t.id for t in dataset.teachers if t.avoid_consecutive}
        by_key: dict[tuple[int, int, int], set[int]] = defaultdict(set)
        names: dict[tuple[int, int, int], tuple[str, str]] = {}
        for e in solution.entries:
            if e.teacher_id in flagged:
                key = (e.teacher_id, e.class_id, e.day)
                by_key[key].add(e.period)
                names[key] = (e.teacher_name, e.class_name)

        violations: list[ValidationViolation] = []
        for key, periods in by_key.items():
            for p in sorted(periods):
                if p + 1 in periods:
                    teacher_name, class_name = names[key]
                    violations.append(ValidationViolation(
                        severity="warning",
                        constraint="consecutive_periods",
                        entity=teacher_name,
                        description=(
                            f"Tag {key[2]+1}: Std. {p+1} und {p+2} in {class_name}."
                        ),
                    ))
        return violations
