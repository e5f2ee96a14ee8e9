from datetime import date, timedelta

from config.schema import (
    AppConfig,
    SolverConfig,
    SwitchConfig,
    TimetableConfig,
)


DAY_NAMES = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]


def monday_of(day: date) -> date:
    """Montag der Woche, in der `day` liegt."""
    return day - timedelta(days=day.weekday())


def default_timetable_config() -> TimetableConfig:
    """Standard-Raster: sechs Schultage mit Mittagspause.

    6 Tage × 6 Stunden, Mittagspause auf Stunden-Index 3:

        Index  0  1  2  3  4  5
               x  x  x  —  x  x     (— = Mittagspause, nie belegt)

    → 5 belegbare Stunden pro Tag, 30 pro Woche und Klasse.
    """
    return TimetableConfig(
        periods_per_day=6,
        days_per_week=6,
        lunch_period=3,
        week_start=monday_of(date.today()),
        day_names=list(DAY_NAMES),
    )


def default_switches() -> SwitchConfig:
    """Alle Regeln aktiv."""
    return SwitchConfig(
        honor_availability=True,
        no_double_booking=True,
        avoid_consecutive=True,
        balance_teacher_load=True,
    )


def default_app_config() -> AppConfig:
    """Komplette Default-Konfiguration."""
    return AppConfig(
        school_name="Muster-Schule",
        timetable=default_timetable_config(),
        switches=default_switches(),
        solver=SolverConfig(),
    )
