"""Diagnose bei INFEASIBLE durch schrittweise Lockerung der Regeln.

Läuft vollständig beim Aufrufer: Der Solver selbst lockert nie etwas,
hier werden nur weitere, unabhängige Läufe mit geänderten Schaltern bzw.
einer Datensatz-Kopie gestartet.
"""

import time
import logging
from typing import Optional

from pydantic import BaseModel

from config.schema import SolverConfig, SwitchConfig
from models.dataset import Dataset
from solver.errors import ErrorKind
from solver.scheduler import generate_schedule

logger = logging.getLogger(__name__)

STATUS_SOLVED = "SOLVED"


# ─── Ergebnis-Modelle ─────────────────────────────────────────────────────────

class RelaxResult(BaseModel):
    """Ergebnis einer einzelnen Lockerung."""
    name: str
    description: str
    status: str        # "SOLVED" / ErrorKind-Wert ("infeasible", "search_aborted", ...)
    solve_time: float


class RelaxReport(BaseModel):
    """Vollständiger Bericht der Regel-Lockerung."""
    original_status: str
    relaxations: list[RelaxResult]
    recommendation: str

    def print_rich(self) -> None:
        """Gibt den Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title=f"Diagnose (Original: {self.original_status})", box=box.ROUNDED)
        table.add_column("Lockerung", style="bold")
        table.add_column("Status")
        table.add_column("Zeit", justify="right")
        for r in self.relaxations:
            color = "green" if r.status == STATUS_SOLVED else "red"
            table.add_row(r.description, f"[{color}]{r.status}[/{color}]",
                          f"{r.solve_time:.2f}s")
        console.print(table)
        console.print(self.recommendation)


# ─── ConstraintRelaxer ────────────────────────────────────────────────────────

class ConstraintRelaxer:
    """Systematische Diagnose bei INFEASIBLE.

    Testet 5 Lockerungen:
      1. avoid_consecutive aus
      2. honor_availability aus
      3. no_double_booking aus
      4. Tages-/Wochenlimits aller Lehrkräfte verdoppelt (Datensatz-Kopie)
      5. Alle obigen kombiniert
    """

    def __init__(self, dataset: Dataset, switches: Optional[SwitchConfig] = None) -> None:
        self.data = dataset
        self.switches = switches or SwitchConfig()

    def diagnose(self, max_steps: Optional[int] = 200_000) -> RelaxReport:
        """Führt alle Lockerungen durch und erstellt einen Bericht.

        Args:
            max_steps: Schrittlimit pro Lauf (None = unbegrenzt)
        """
        budget = SolverConfig(max_steps=max_steps)
        original_status, _ = self._run(self.data, self.switches, budget)

        results = [
            self._test_relaxation(
                "no_consecutive",
                "Folgestunden erlaubt (avoid_consecutive aus)",
                self.data, self.switches.model_copy(update={"avoid_consecutive": False}),
                budget,
            ),
            self._test_relaxation(
                "no_availability",
                "Verfügbarkeit ignoriert (honor_availability aus)",
                self.data, self.switches.model_copy(update={"honor_availability": False}),
                budget,
            ),
            self._test_relaxation(
                "allow_double_booking",
                "Doppelbelegung erlaubt (no_double_booking aus)",
                self.data, self.switches.model_copy(update={"no_double_booking": False}),
                budget,
            ),
            self._test_relaxation(
                "caps_doubled",
                "Tages-/Wochenlimits verdoppelt",
                self._relax_double_caps(), self.switches, budget,
            ),
            self._test_relaxation(
                "all_combined",
                "Alle Lockerungen kombiniert",
                self._relax_double_caps(),
                SwitchConfig(
                    honor_availability=False,
                    no_double_booking=False,
                    avoid_consecutive=False,
                    balance_teacher_load=self.switches.balance_teacher_load,
                ),
                budget,
            ),
        ]

        recommendation = self._build_recommendation(original_status, results)
        logger.info(f"ConstraintRelaxer: {recommendation}")

        return RelaxReport(
            original_status=original_status,
            relaxations=results,
            recommendation=recommendation,
        )

    # ─── Einzel-Lockerungen ───────────────────────────────────────────────────

    def _relax_double_caps(self) -> Dataset:
        """Datensatz-Kopie mit verdoppelten Tages- und Wochenlimits."""
        teachers = [
            t.model_copy(update={
                "max_per_day": t.max_per_day * 2,
                "max_per_week": t.max_per_week * 2,
            })
            for t in self.data.teachers
        ]
        return self.data.model_copy(update={"teachers": teachers})

    # ─── Solver-Ausführung ────────────────────────────────────────────────────

    def _test_relaxation(
        self,
        name: str,
        description: str,
        data: Dataset,
        switches: SwitchConfig,
        budget: SolverConfig,
    ) -> RelaxResult:
        """Testet eine einzelne Lockerung."""
        status, elapsed = self._run(data, switches, budget)
        logger.info(f"  Lockerung '{name}': {status} ({elapsed:.2f}s)")
        return RelaxResult(
            name=name,
            description=description,
            status=status,
            solve_time=elapsed,
        )

    def _run(
        self, data: Dataset, switches: SwitchConfig, budget: SolverConfig
    ) -> tuple[str, float]:
        """Führt den Solver aus und gibt (Status, Zeit) zurück."""
        t0 = time.monotonic()
        result = generate_schedule(data, switches, budget)
        elapsed = time.monotonic() - t0
        if result.ok:
            return STATUS_SOLVED, elapsed
        return result.error_kind.value, elapsed

    # ─── Empfehlung ───────────────────────────────────────────────────────────

    def _build_recommendation(
        self, original_status: str, results: list[RelaxResult]
    ) -> str:
        """Erstellt eine menschenlesbare Empfehlung basierend auf den Ergebnissen."""
        if original_status == STATUS_SOLVED:
            return "Der Datensatz ist mit den aktuellen Regeln lösbar."

        if original_status == ErrorKind.NO_DEMAND.value:
            return (
                "Kein Stundenbedarf definiert. Lockerungen helfen nicht, "
                "zuerst Wochenstunden je Klasse und Fach anlegen."
            )
        if original_status == ErrorKind.INVALID_CONFIG.value:
            return (
                "Die Raster-Konfiguration ist ungültig. Lockerungen helfen nicht, "
                "zuerst Tage, Stunden und Mittagspause korrigieren."
            )

        by_name = {r.name: r.status for r in results}
        if all(s != STATUS_SOLVED for s in by_name.values()):
            if any(s == ErrorKind.SEARCH_ABORTED.value for s in by_name.values()):
                return (
                    "Mindestens ein Lauf wurde abgebrochen (Schrittlimit). "
                    "Erhöhen Sie max_steps oder verkleinern Sie das Problem."
                )
            return (
                "Problem bleibt unlösbar auch nach allen Lockerungen. "
                "Vermutlich fehlen befähigte Lehrkräfte oder Slots. "
                "Prüfen Sie den Machbarkeits-Check."
            )

        fixes = []
        if by_name.get("no_consecutive") == STATUS_SOLVED:
            fixes.append(
                "Folgestunden-Regel: Lehrkräfte mit avoid_consecutive finden "
                "keine nicht-benachbarten Slots. Flag entfernen oder Schalter lockern."
            )
        if by_name.get("no_availability") == STATUS_SOLVED:
            fixes.append(
                "Verfügbarkeit: Zu viele gesperrte Zellen. Verfügbarkeit erweitern."
            )
        if by_name.get("allow_double_booking") == STATUS_SOLVED:
            fixes.append(
                "Doppelbelegung: Zu wenige Lehrkräfte für parallele Klassen."
            )
        if by_name.get("caps_doubled") == STATUS_SOLVED:
            fixes.append(
                "Limits: max_per_day / max_per_week der Lehrkräfte sind zu eng."
            )

        if fixes:
            return "Mögliche Ursachen:\n" + "\n".join(f"  • {f}" for f in fixes)

        return (
            "Erst alle Lockerungen kombiniert helfen. "
            "Mehrere Regeln stehen gleichzeitig im Konflikt."
        )
