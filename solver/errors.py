"""Fehlerarten des Solvers.

Alle Fehler brechen den Lauf sofort ab; es gibt keine automatische
Lockerung von Regeln. Ein erneuter Versuch mit anderen Schaltern ist
Sache des Aufrufers.
"""

from enum import Enum

_INFEASIBLE_MSG = (
    "Nicht alle Regeln erfüllbar. Grenzen lockern oder Verfügbarkeit erweitern."
)


class ErrorKind(str, Enum):
    INVALID_CONFIG = "invalid_config"
    NO_DEMAND = "no_demand"
    INFEASIBLE = "infeasible"
    SEARCH_ABORTED = "search_aborted"


class ScheduleError(Exception):
    """Basisklasse aller Solver-Fehler. `kind` ist maschinenlesbar."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value}: {self.message})"


class InvalidConfigError(ScheduleError):
    """Raster-Werte außerhalb der erlaubten Grenzen (vor der Suche erkannt)."""

    kind = ErrorKind.INVALID_CONFIG

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Ungültige Raster-Konfiguration: " + " ".join(errors))
        self.errors = list(errors)


class NoDemandError(ScheduleError):
    """Kein Stundenbedarf – nichts zu planen."""

    kind = ErrorKind.NO_DEMAND

    def __init__(self, message: str = "Kein Stundenbedarf definiert.") -> None:
        super().__init__(message)


class InfeasibleError(ScheduleError):
    """Suche erschöpft, keine vollständige Belegung unter den aktiven Regeln."""

    kind = ErrorKind.INFEASIBLE

    def __init__(self, message: str = _INFEASIBLE_MSG, steps: int = 0) -> None:
        super().__init__(message)
        self.steps = steps


class SearchAbortedError(ScheduleError):
    """Schritt- oder Zeitbudget der Suche überschritten."""

    kind = ErrorKind.SEARCH_ABORTED

    def __init__(self, message: str, steps: int = 0, elapsed: float = 0.0) -> None:
        super().__init__(message)
        self.steps = steps
        self.elapsed = elapsed
