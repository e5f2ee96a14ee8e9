from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


# ─── ZEITRASTER ───

class TimetableConfig(BaseModel):
    """Wochenraster: Tage × Stunden, optional mit Mittagspause.

    Grenzen prüft validation_errors(); der Solver meldet Verstöße vor der
    Suche als InvalidConfigError.
    """
    # Anzahl Unterrichtsstunden pro Tag (Stunden-Index 0-basiert)
    periods_per_day: int = Field(6,
        description="Unterrichtsstunden pro Tag")
    # Anzahl Unterrichtstage pro Woche
    days_per_week: int = Field(6,
        description="Unterrichtstage pro Woche")
    # Stunden-Index der Mittagspause (None = keine Mittagspause)
    lunch_period: Optional[int] = Field(3,
        description="Stunden-Index der Mittagspause (wird nie belegt)")
    # Wochenbeginn, nur für die Anzeige
    week_start: Optional[date] = None
    # Namen der Wochentage (nur Anzeige)
    day_names: list[str] = Field(
        default=["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"],
        description="Namen der Wochentage")

    def validation_errors(self) -> list[str]:
        """Prüft die Grenzen des Rasters. Leere Liste = gültig."""
        errors: list[str] = []
        if self.periods_per_day < 1:
            errors.append(
                f"periods_per_day muss >= 1 sein (ist {self.periods_per_day})."
            )
        if self.days_per_week < 1:
            errors.append(
                f"days_per_week muss >= 1 sein (ist {self.days_per_week})."
            )
        if self.lunch_period is not None and not (
            0 <= self.lunch_period < max(self.periods_per_day, 0)
        ):
            errors.append(
                f"lunch_period {self.lunch_period} liegt außerhalb von "
                f"[0, {self.periods_per_day})."
            )
        return errors

    @property
    def teaching_periods(self) -> list[int]:
        """Alle belegbaren Stunden-Indizes eines Tages (ohne Mittagspause)."""
        return [
            p for p in range(self.periods_per_day)
            if p != self.lunch_period
        ]

    def day_name(self, day: int) -> str:
        """Abgekürzter Tagesname (Fallback: Tagesnummer)."""
        if 0 <= day < len(self.day_names):
            return self.day_names[day]
        return str(day + 1)


# ─── SCHALTER ───

class SwitchConfig(BaseModel):
    """Regel-Schalter für die Suche. Alle vier sind frei kombinierbar."""
    # Hart: nur Slots mit explizitem "verfügbar"-Eintrag
    honor_availability: bool = Field(True,
        description="Verfügbarkeit der Lehrkräfte beachten")
    # Hart: keine Lehrkraft in zwei Klassen zur selben Zeit
    no_double_booking: bool = Field(True,
        description="Keine Doppelbelegung von Lehrkräften")
    # "Weich" laut Oberfläche, wirkt aber als harter Filter
    avoid_consecutive: bool = Field(True,
        description="Aufeinanderfolgende Stunden derselben Klasse vermeiden")
    # Heuristik: Lehrkräfte mit wenig Wochenstunden zuerst probieren
    balance_teacher_load: bool = Field(True,
        description="Lehrkräfte nach Wochenlast sortieren")


# ─── SOLVER ───

class SolverConfig(BaseModel):
    """Budget der Backtracking-Suche. None = unbegrenzt."""
    # Maximale Anzahl Platzierungsversuche
    max_steps: Optional[int] = Field(None, ge=1,
        description="Max. Platzierungsversuche (None = unbegrenzt)")
    # Zeitlimit in Sekunden
    time_limit_seconds: Optional[float] = Field(None, gt=0,
        description="Zeitlimit Suche in Sekunden (None = unbegrenzt)")


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration der Anwendung."""
    # Name der Schule (nur Anzeige)
    school_name: str = Field("Muster-Schule",
        description="Name der Schule")
    # Wochenraster
    timetable: TimetableConfig = Field(default_factory=TimetableConfig)
    # Regel-Schalter
    switches: SwitchConfig = Field(default_factory=SwitchConfig)
    # Such-Budget
    solver: SolverConfig = Field(default_factory=SolverConfig)
