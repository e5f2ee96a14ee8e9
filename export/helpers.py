"""Gemeinsame Hilfsfunktionen für Terminal- und Excel-Ausgabe."""

from collections import defaultdict
from datetime import date, timedelta

from config.schema import TimetableConfig
from solver.result import ScheduleEntry

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "lesson":   "B3D4FF",
    "free":     "F5F5F5",
    "gap":      "FF9999",
    "lunch":    "DDDDDD",
    "header":   "4472C4",
}

LUNCH_LABEL = "Mittag"


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def week_label(config: TimetableConfig) -> str:
    """"Woche ab 13.10.2025" bzw. leer ohne week_start."""
    if config.week_start is None:
        return ""
    return f"Woche ab {config.week_start.strftime('%d.%m.%Y')}"


def day_date(config: TimetableConfig, day: int) -> date | None:
    """Kalenderdatum eines Tages relativ zu week_start (nur Anzeige)."""
    if config.week_start is None:
        return None
    return config.week_start + timedelta(days=day)


# ─── Raster-Hilfsfunktionen ───────────────────────────────────────────────────

def period_labels(config: TimetableConfig) -> list[tuple[int, str]]:
    """(Stunden-Index, Beschriftung) für alle Stunden eines Tages.

    Belegbare Stunden werden 1-basiert durchnummeriert ("1", "2", ...),
    die Mittagspause heißt LUNCH_LABEL.
    """
    labels: list[tuple[int, str]] = []
    for p in range(config.periods_per_day):
        if config.lunch_period is not None and p == config.lunch_period:
            labels.append((p, LUNCH_LABEL))
        else:
            labels.append((p, str(p + 1)))
    return labels


def build_grid(
    entries: list[ScheduleEntry],
) -> dict[tuple[int, int], list[ScheduleEntry]]:
    """Baut {(day, period): [entries]} für die übergebenen Entries auf."""
    grid: dict[tuple[int, int], list[ScheduleEntry]] = defaultdict(list)
    for e in entries:
        grid[(e.day, e.period)].append(e)
    return grid


# ─── Springstunden / Folgestunden ─────────────────────────────────────────────

def gap_cells(entries: list[ScheduleEntry], config: TimetableConfig) -> set[tuple[int, int]]:
    """Freie (day, period)-Zellen zwischen erster und letzter Stunde eines Tages.

    Die Mittagspause zählt nie als Springstunde.
    """
    by_day: dict[int, set[int]] = defaultdict(set)
    for e in entries:
        by_day[e.day].add(e.period)
    gaps: set[tuple[int, int]] = set()
    for day, periods in by_day.items():
        if len(periods) < 2:
            continue
        for p in range(min(periods) + 1, max(periods)):
            if p not in periods and p != config.lunch_period:
                gaps.add((day, p))
    return gaps


def count_gaps(entries: list[ScheduleEntry], config: TimetableConfig) -> int:
    """Zählt Springstunden (freie Stunden zwischen erster und letzter Stunde pro Tag)."""
    return len(gap_cells(entries, config))


def count_consecutive_pairs(entries: list[ScheduleEntry]) -> int:
    """Zählt direkt benachbarte Stunden-Paare je (Lehrkraft, Klasse, Tag)."""
    by_key: dict[tuple[int, int, int], set[int]] = defaultdict(set)
    for e in entries:
        by_key[(e.teacher_id, e.class_id, e.day)].add(e.period)
    total = 0
    for periods in by_key.values():
        total += sum(1 for p in periods if p + 1 in periods)
    return total


# ─── Lehrer-Stunden ───────────────────────────────────────────────────────────

def count_teacher_hours(entries: list[ScheduleEntry], teacher_id: int) -> int:
    """Zählt die Wochenstunden einer Lehrkraft."""
    return sum(1 for e in entries if e.teacher_id == teacher_id)


def teacher_hours_per_day(
    entries: list[ScheduleEntry], teacher_id: int
) -> dict[int, int]:
    """{day: Stunden} einer Lehrkraft (nur Tage mit Unterricht)."""
    per_day: dict[int, int] = defaultdict(int)
    for e in entries:
        if e.teacher_id == teacher_id:
            per_day[e.day] += 1
    return dict(per_day)


# ─── Zelleninhalt-Formatierung ────────────────────────────────────────────────

def format_entry(entry: ScheduleEntry, mode: str = "class") -> str:
    """Formatiert einen einzelnen Entry als Zelleninhalt.

    mode='class':   "Fach\\nLehrkraft"
    mode='teacher': "Fach\\nKlasse"
    """
    if mode == "class":
        return f"{entry.subject_name}\n{entry.teacher_name}"
    elif mode == "teacher":
        return f"{entry.subject_name}\n{entry.class_name}"
    return entry.subject_name


def format_entries(entries: list[ScheduleEntry], mode: str = "class") -> str:
    """Formatiert mehrere Entries für eine Zelle (getrennt durch ──).

    Mehrere Entries pro Zelle entstehen nur in Lehrer-Ansichten, wenn
    Doppelbelegung erlaubt war.
    """
    if not entries:
        return ""
    return "\n──\n".join(format_entry(e, mode) for e in entries)
