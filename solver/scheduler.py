"""Backtracking-Stundenplan-Solver.

Ablauf:
  - Bedarfs-Warteschlange (größter Bedarf zuerst) und Slots je Klasse aufbauen
  - Rekursive Tiefensuche über den Bedarfs-Index i:
      für jeden freien Slot der Klasse (früheste zuerst)
        für jede befähigte Lehrkraft (optional nach Wochenlast sortiert)
          zulässig? → platzieren → _backtrack(i) → sonst exakt zurücknehmen
  - Keine Propagation, kein Memo, kein Look-ahead: vollständige Suche mit
    Regel-Pruning. Laufzeit im schlimmsten Fall exponentiell.
"""

import sys
import time
import logging
from dataclasses import dataclass, field
from typing import Optional

from config.schema import SolverConfig, SwitchConfig
from models.dataset import Dataset
from models.timeslot import Slot
from solver.constraints import SearchContext, admissible
from solver.demand import Demand, build_demand
from solver.errors import (
    ErrorKind,
    InfeasibleError,
    InvalidConfigError,
    ScheduleError,
    SearchAbortedError,
)
from solver.result import ScheduleEntry, ScheduleSolution, build_rows
from solver.slots import enumerate_slots, free_slots
from solver.state import SearchState

logger = logging.getLogger(__name__)

# Reserve für Aufrufer-Frames oberhalb von _backtrack
_RECURSION_HEADROOM = 200


# ─── Ergebnis des Einstiegspunkts ─────────────────────────────────────────────

@dataclass
class ScheduleResult:
    """Entweder Zeilen (Erfolg) oder ein Fehler – nie beides."""

    rows: list[ScheduleEntry] = field(default_factory=list)
    error: Optional[ScheduleError] = None
    solution: Optional[ScheduleSolution] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None


# ─── Haupt-Solver ─────────────────────────────────────────────────────────────

class ScheduleSolver:
    """Backtracking-Solver für einen Datensatz.

    Verwendung:
        solver = ScheduleSolver(dataset, switches)
        solution = solver.solve()

    Jeder solve()-Aufruf arbeitet auf einem eigenen SearchState; eine
    Instanz darf nicht parallel aus mehreren Threads genutzt werden.
    """

    def __init__(
        self,
        dataset: Dataset,
        switches: Optional[SwitchConfig] = None,
        solver_config: Optional[SolverConfig] = None,
    ) -> None:
        self.data = dataset
        self.config = dataset.config
        self.switches = switches or SwitchConfig()
        self.solver_config = solver_config or SolverConfig()

        # Werden in solve() befüllt
        self._demand: list[Demand] = []
        self._slots: dict[int, list[Slot]] = {}
        self._pools: dict[int, list[int]] = {}     # subject_id → capable teacher_ids
        self._context: Optional[SearchContext] = None
        self._state = SearchState()
        self._steps = 0
        self._t0 = 0.0

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    @property
    def state(self) -> SearchState:
        """Suchzustand des letzten Laufs.

        Nach Erfolg die vollständige Belegung, nach INFEASIBLE oder Abbruch
        der leere Ausgangszustand; auch alle Bedarfe stehen dann wieder auf
        ihrem Anfangswert.
        """
        return self._state

    @property
    def steps(self) -> int:
        """Anzahl Platzierungen des letzten Laufs (inkl. zurückgenommener)."""
        return self._steps

    def solve(self) -> ScheduleSolution:
        """Löst das Problem vollständig oder wirft einen ScheduleError."""
        errors = self.config.validation_errors()
        if errors:
            raise InvalidConfigError(errors)

        self._demand = build_demand(self.data.workloads)
        self._slots = enumerate_slots(self.data.classes, self.config)
        self._context = SearchContext(self.data)
        self._pools = {
            d.subject_id: self.data.capable_teacher_ids(d.subject_id)
            for d in self._demand
        }
        self._state = SearchState()
        self._steps = 0
        self._t0 = time.monotonic()

        units = sum(d.remaining for d in self._demand)
        logger.info(
            f"Suche startet: {len(self._demand)} Bedarfe ({units} Stunden) | "
            f"{sum(len(s) for s in self._slots.values())} Slots | "
            f"{len(self.data.teachers)} Lehrkräfte | "
            f"Schalter: {self.switches.model_dump()}"
        )

        # Rekursionstiefe = Stunden + Bedarfe (+ Rahmen des Aufrufers)
        needed = units + len(self._demand) + _RECURSION_HEADROOM
        old_limit = sys.getrecursionlimit()
        if needed > old_limit:
            sys.setrecursionlimit(needed)
        try:
            found = self._backtrack(0)
        except SearchAbortedError as e:
            logger.warning(f"Suche abgebrochen: {e.message}")
            raise
        finally:
            if needed > old_limit:
                sys.setrecursionlimit(old_limit)

        elapsed = time.monotonic() - self._t0
        status = "SOLVED" if found else "INFEASIBLE"
        logger.info(
            f"Suche beendet: {status} | "
            f"Zeit: {elapsed:.3f}s | "
            f"Platzierungen: {self._steps}"
        )

        if not found:
            logger.warning("Keine vollständige Belegung unter den aktiven Regeln.")
            raise InfeasibleError(steps=self._steps)

        return ScheduleSolution(
            entries=build_rows(self._state.assigned, self.data),
            solver_status=status,
            steps=self._steps,
            solve_time_seconds=elapsed,
            switches=self.switches,
            config_snapshot=self.config,
        )

    # ─── Suche ────────────────────────────────────────────────────────────────

    def _backtrack(self, i: int) -> bool:
        if i == len(self._demand):
            return True
        demand = self._demand[i]
        if demand.remaining == 0:
            return self._backtrack(i + 1)

        state = self._state
        candidates = free_slots(self._slots.get(demand.class_id, []), state.assigned)
        pool = self._teacher_pool(demand.subject_id)

        for slot in candidates:
            for teacher_id in pool:
                if not admissible(
                    teacher_id, slot.day, slot.period, demand.class_id,
                    demand.subject_id, state, self.switches, self._context,
                ):
                    continue

                record = state.place(slot, teacher_id, demand)
                try:
                    self._tick()
                    if logger.isEnabledFor(logging.DEBUG):
                        logger.debug(
                            f"  + {slot} Fach {demand.subject_id} → Lehrkraft {teacher_id} "
                            f"(offen: {demand.remaining})"
                        )
                    if self._backtrack(i):
                        return True
                except SearchAbortedError:
                    # Abbruch: Stapel vollständig abbauen, Zustand bleibt leer
                    state.undo(record)
                    raise

                state.undo(record)
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(f"  - {slot} Lehrkraft {teacher_id} zurückgenommen")

        return False

    def _teacher_pool(self, subject_id: int) -> list[int]:
        """Befähigte Lehrkräfte, bei balance_teacher_load nach Wochenlast."""
        pool = self._pools.get(subject_id, [])
        if self.switches.balance_teacher_load:
            # sorted() ist stabil → Gleichstand in Lehrer-Reihenfolge
            return sorted(pool, key=self._state.week_count)
        return list(pool)

    def _tick(self) -> None:
        """Zählt eine Platzierung und prüft das Such-Budget."""
        self._steps += 1
        sc = self.solver_config
        if sc.max_steps is not None and self._steps > sc.max_steps:
            raise SearchAbortedError(
                f"Schrittlimit von {sc.max_steps} Platzierungen überschritten.",
                steps=self._steps,
                elapsed=time.monotonic() - self._t0,
            )
        if sc.time_limit_seconds is not None:
            elapsed = time.monotonic() - self._t0
            if elapsed > sc.time_limit_seconds:
                raise SearchAbortedError(
                    f"Zeitlimit von {sc.time_limit_seconds}s überschritten.",
                    steps=self._steps,
                    elapsed=elapsed,
                )


# ─── Einstiegspunkt ───────────────────────────────────────────────────────────

def generate_schedule(
    dataset: Dataset,
    switches: Optional[SwitchConfig] = None,
    solver_config: Optional[SolverConfig] = None,
) -> ScheduleResult:
    """Erzeugt einen Stundenplan und meldet Fehler als Wert statt Exception.

    Gibt ScheduleResult(rows=...) bei Erfolg oder ScheduleResult(error=...)
    zurück. Teilergebnisse gibt es nicht.
    """
    solver = ScheduleSolver(dataset, switches, solver_config)
    try:
        solution = solver.solve()
    except ScheduleError as e:
        return ScheduleResult(error=e)
    return ScheduleResult(rows=solution.entries, solution=solution)
