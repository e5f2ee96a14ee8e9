"""Qualitätsbericht für fertige Stundenpläne.

Analysiert Lehrer-Auslastung, Klassen-Qualität und berechnet
zusammenfassende Metriken.
"""

from collections import defaultdict

from pydantic import BaseModel

from models.dataset import Dataset
from solver.result import ScheduleEntry, ScheduleSolution
from export.helpers import (
    count_consecutive_pairs, count_gaps, count_teacher_hours, teacher_hours_per_day,
)


# ─── Metriken-Modelle ─────────────────────────────────────────────────────────

class TeacherQualityMetrics(BaseModel):
    """Qualitäts-Metriken für eine einzelne Lehrkraft."""

    teacher_id: int
    name: str
    actual_hours: int
    max_per_week: int
    max_per_day: int
    utilization: float           # actual_hours / max_per_week
    gaps_total: int
    hours_per_day: dict[str, int]
    free_days: int
    consecutive_pairs: int
    subjects_taught: list[str]


class ClassQualityMetrics(BaseModel):
    """Qualitäts-Metriken für eine einzelne Klasse."""

    class_id: int
    name: str
    total_hours: int
    hours_per_day: dict[str, int]
    gaps_total: int
    subject_spread_score: float  # 0.0–1.0


class ScheduleQualityReport(BaseModel):
    """Vollständiger Qualitätsbericht für eine ScheduleSolution."""

    teacher_metrics: list[TeacherQualityMetrics]
    class_metrics: list[ClassQualityMetrics]
    total_gaps: int
    avg_gaps_per_teacher: float
    load_fairness_index: float      # Jain's fairness index (1.0 = perfekt)
    consecutive_pairs: int
    solver_status: str
    steps: int
    solve_time: float


# ─── Analyzer ─────────────────────────────────────────────────────────────────

class QualityAnalyzer:
    """Berechnet Qualitätsmetriken für eine fertige ScheduleSolution."""

    def analyze(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> ScheduleQualityReport:
        """Hauptmethode: berechnet alle Metriken und gibt einen Report zurück."""
        teacher_metrics = self._teacher_metrics(solution, dataset)
        class_metrics = self._class_metrics(solution, dataset)

        total_gaps = sum(m.gaps_total for m in teacher_metrics)
        n = len(teacher_metrics)
        avg_gaps = total_gaps / n if n > 0 else 0.0

        # Jain's Fairness Index auf der Auslastung: (Σ u_i)² / (n * Σ u_i²)
        loads = [m.utilization for m in teacher_metrics]
        sum_u = sum(loads)
        sum_sq = sum(u * u for u in loads)
        if sum_sq > 0:
            fairness = (sum_u ** 2) / (n * sum_sq)
        else:
            fairness = 1.0

        return ScheduleQualityReport(
            teacher_metrics=teacher_metrics,
            class_metrics=class_metrics,
            total_gaps=total_gaps,
            avg_gaps_per_teacher=round(avg_gaps, 2),
            load_fairness_index=round(fairness, 4),
            consecutive_pairs=count_consecutive_pairs(solution.entries),
            solver_status=solution.solver_status,
            steps=solution.steps,
            solve_time=round(solution.solve_time_seconds, 3),
        )

    def print_rich(self, report: ScheduleQualityReport) -> None:
        """Übersicht, Lehrer-Tabelle und Klassen-Tabelle über Rich."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        fairness = report.load_fairness_index
        tone = _traffic_light(fairness, good=0.95, ok=0.85)
        console.print(Panel(
            f"{report.solver_status} nach {report.steps} Platzierungen "
            f"({report.solve_time}s)\n"
            f"Springstunden: [bold]{report.total_gaps}[/bold] gesamt, "
            f"Ø {report.avg_gaps_per_teacher:.1f} je Lehrkraft\n"
            f"Fairness der Auslastung (Jain, 1.0 = gleichmäßig): "
            f"[{tone}]{fairness:.4f}[/{tone}]\n"
            f"Benachbarte Stunden (Lehrkraft/Klasse/Tag): {report.consecutive_pairs}",
            title="Qualitätsbericht",
            border_style="cyan",
        ))

        teachers = Table(title="Lehrkräfte", box=box.SIMPLE_HEAD)
        teachers.add_column("Lehrkraft", no_wrap=True)
        teachers.add_column("Stunden", justify="right")
        teachers.add_column("Auslastung", justify="right")
        teachers.add_column("Woche")
        teachers.add_column("Springst.", justify="right")
        teachers.add_column("Fächer")
        for m in sorted(report.teacher_metrics, key=lambda x: x.teacher_id):
            over_cap = any(h > m.max_per_day for h in m.hours_per_day.values())
            load = f"{m.actual_hours}/{m.max_per_week}"
            strip = _day_strip(m.hours_per_day)
            teachers.add_row(
                m.name,
                f"[red]{load}[/red]" if m.actual_hours > m.max_per_week else load,
                f"{m.utilization:.0%}",
                f"[red]{strip}[/red]" if over_cap else strip,
                str(m.gaps_total),
                ", ".join(m.subjects_taught) or "—",
            )
        console.print(teachers)

        classes = Table(title="Klassen", box=box.SIMPLE_HEAD)
        classes.add_column("Klasse", no_wrap=True)
        classes.add_column("Stunden", justify="right")
        classes.add_column("Woche")
        classes.add_column("Springst.", justify="right")
        classes.add_column("Verteilung", justify="right")
        for m in sorted(report.class_metrics, key=lambda x: x.class_id):
            tone = _traffic_light(m.subject_spread_score, good=0.7, ok=0.4)
            classes.add_row(
                m.name,
                str(m.total_hours),
                _day_strip(m.hours_per_day),
                str(m.gaps_total),
                f"[{tone}]{m.subject_spread_score:.2f}[/{tone}]",
            )
        console.print(classes)

    # ── Private Berechnungen ──────────────────────────────────────────────────

    def _teacher_metrics(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> list[TeacherQualityMetrics]:
        """Berechnet Metriken für alle Lehrer."""
        cfg = dataset.config
        metrics = []

        for teacher in dataset.teachers:
            entries = solution.get_teacher_schedule(teacher.id)
            actual = count_teacher_hours(solution.entries, teacher.id)
            per_day = teacher_hours_per_day(solution.entries, teacher.id)

            hours_per_day = {
                cfg.day_name(d): per_day.get(d, 0) for d in range(cfg.days_per_week)
            }
            utilization = actual / teacher.max_per_week if teacher.max_per_week > 0 else 0.0

            metrics.append(TeacherQualityMetrics(
                teacher_id=teacher.id,
                name=teacher.name,
                actual_hours=actual,
                max_per_week=teacher.max_per_week,
                max_per_day=teacher.max_per_day,
                utilization=round(utilization, 4),
                gaps_total=count_gaps(entries, cfg),
                hours_per_day=hours_per_day,
                free_days=cfg.days_per_week - len(per_day),
                consecutive_pairs=count_consecutive_pairs(entries),
                subjects_taught=sorted({e.subject_name for e in entries}),
            ))

        return metrics

    def _class_metrics(
        self, solution: ScheduleSolution, dataset: Dataset
    ) -> list[ClassQualityMetrics]:
        """Berechnet Metriken für alle Klassen."""
        cfg = dataset.config
        metrics = []

        for cls in dataset.classes:
            entries = solution.get_class_schedule(cls.id)

            by_day: dict[int, int] = defaultdict(int)
            for e in entries:
                by_day[e.day] += 1
            hours_per_day = {
                cfg.day_name(d): by_day.get(d, 0) for d in range(cfg.days_per_week)
            }

            metrics.append(ClassQualityMetrics(
                class_id=cls.id,
                name=cls.name,
                total_hours=len(entries),
                hours_per_day=hours_per_day,
                gaps_total=count_gaps(entries, cfg),
                subject_spread_score=round(
                    _compute_spread_score(entries, cfg.days_per_week), 3
                ),
            ))

        return metrics


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _compute_spread_score(entries: list[ScheduleEntry], days_per_week: int) -> float:
    """Berechnet wie gleichmäßig Fächer über die Woche verteilt sind.

    Score 0.0–1.0:
    - 1.0 = jedes Fach ist auf möglichst viele verschiedene Tage verteilt
    - 0.0 = alle Stunden eines Fachs liegen am selben Tag
    """
    subject_days: dict[int, set[int]] = defaultdict(set)
    subject_hours: dict[int, int] = defaultdict(int)
    for e in entries:
        subject_days[e.subject_id].add(e.day)
        subject_hours[e.subject_id] += 1

    if not subject_hours:
        return 1.0

    # Für jedes Fach: Verhältnis (Anzahl verschiedener Tage) / min(Stunden, days_per_week)
    scores = []
    for subj, hours in subject_hours.items():
        max_days = min(hours, days_per_week)
        actual_days = len(subject_days[subj])
        scores.append(actual_days / max_days if max_days > 0 else 1.0)

    return sum(scores) / len(scores)


def _traffic_light(value: float, good: float, ok: float) -> str:
    if value >= good:
        return "green"
    return "yellow" if value >= ok else "red"


def _day_strip(hours_per_day: dict[str, int]) -> str:
    """"Mo 2 · Di 0 · …" für eine Tabellenzelle."""
    return " · ".join(f"{day} {h}" for day, h in hours_per_day.items())
