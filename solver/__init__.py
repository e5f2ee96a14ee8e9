"""Solver-Modul (Backtracking-Suche mit Regel-Pruning)."""

from .errors import (
    ErrorKind,
    ScheduleError,
    InvalidConfigError,
    NoDemandError,
    InfeasibleError,
    SearchAbortedError,
)
from .result import ScheduleEntry, ScheduleSolution
from .scheduler import ScheduleSolver, ScheduleResult, generate_schedule

__all__ = [
    "ErrorKind",
    "ScheduleError",
    "InvalidConfigError",
    "NoDemandError",
    "InfeasibleError",
    "SearchAbortedError",
    "ScheduleEntry",
    "ScheduleSolution",
    "ScheduleSolver",
    "ScheduleResult",
    "generate_schedule",
]
