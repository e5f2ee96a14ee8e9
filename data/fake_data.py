"""Testdaten für den Stundenplan-Generator.

Zwei Quellen:
  - demo_dataset(): kleiner fester Demo-Datensatz (3 Lehrkräfte, 3 Fächer,
    2 Klassen) mit zwei gesperrten Zellen für Alice.
  - DatasetGenerator: zufälliger, per Seed reproduzierbarer Datensatz
    beliebiger Größe. Jedes Fach hat mindestens zwei befähigte Lehrkräfte;
    lösbar ist der Datensatz damit noch nicht garantiert.
"""

import random
import string
from datetime import date
from typing import Optional

from config.defaults import default_timetable_config
from config.schema import TimetableConfig
from models.dataset import Dataset
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from models.workload import AvailabilitySlot, Capability, WorkloadRequirement


# ─── Demo-Datensatz ───────────────────────────────────────────────────────────

def demo_dataset(week_start: Optional[date] = None) -> Dataset:
    """Fester Demo-Datensatz.

    Alice ist am Tag 0 / Stunde 0 und Tag 1 / Stunde 1 nicht verfügbar,
    alle anderen belegbaren Zellen sind für alle Lehrkräfte verfügbar.
    """
    config = default_timetable_config()
    if week_start is not None:
        config = config.model_copy(update={"week_start": week_start})

    teachers = [
        Teacher(id=1, name="Alice", code="T-A", max_per_day=4, max_per_week=18,
                avoid_consecutive=True),
        Teacher(id=2, name="Bob", code="T-B", max_per_day=5, max_per_week=22,
                avoid_consecutive=True),
        Teacher(id=3, name="Carol", code="T-C", max_per_day=4, max_per_week=18,
                avoid_consecutive=False),
    ]
    subjects = [
        Subject(id=1, name="Mathematics", code="MATH"),
        Subject(id=2, name="Science", code="SCI"),
        Subject(id=3, name="English", code="ENG"),
    ]
    classes = [
        SchoolClass(id=1, name="Class A"),
        SchoolClass(id=2, name="Class B"),
    ]
    workloads = [
        WorkloadRequirement(class_id=cls.id, subject_id=subject_id, periods_per_week=ppw)
        for cls in classes
        for subject_id, ppw in ((1, 4), (2, 3), (3, 3))
    ]
    capabilities = [
        Capability(teacher_id=1, subject_id=1),
        Capability(teacher_id=1, subject_id=3),
        Capability(teacher_id=2, subject_id=2),
        Capability(teacher_id=2, subject_id=1),
        Capability(teacher_id=3, subject_id=3),
    ]
    blocked = {(1, 0, 0), (1, 1, 1)}
    availability = [
        AvailabilitySlot(
            teacher_id=t.id, day=d, period=p,
            available=(t.id, d, p) not in blocked,
        )
        for t in teachers
        for d in range(config.days_per_week)
        for p in config.teaching_periods
    ]
    return Dataset(
        config=config,
        teachers=teachers,
        subjects=subjects,
        classes=classes,
        workloads=workloads,
        capabilities=capabilities,
        availability=availability,
    )


# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Andreas", "Birgit", "Christian", "Eva", "Franz", "Gabi", "Jürgen",
    "Kathrin", "Klaus", "Lena", "Markus", "Maria", "Norbert", "Olga",
    "Peter", "Renate", "Stefan", "Tanja", "Ulrich", "Vera", "Yusuf", "Zoe",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch",
    "Bauer", "Richter", "Klein", "Wolf", "Schröder", "Neumann",
    "Schwarz", "Zimmermann", "Braun", "Krüger", "Hartmann", "Lange",
]

# ─── Fächer mit Wochenstunden je Klasse ──────────────────────────────────────

_SUBJECTS: list[tuple[str, str, int]] = [
    ("Mathematik", "MA", 4),
    ("Deutsch", "DE", 4),
    ("Englisch", "EN", 3),
    ("Biologie", "BIO", 2),
    ("Geschichte", "GE", 2),
    ("Sport", "SP", 2),
    ("Musik", "MU", 1),
    ("Kunst", "KU", 1),
]


def _make_abbreviation(last_name: str, used: set[str], rng: random.Random) -> str:
    """Generiert ein eindeutiges 3-Zeichen-Kürzel aus dem Nachnamen."""
    base = (
        last_name.upper()
        .replace("Ä", "AE").replace("Ö", "OE").replace("Ü", "UE")
        .replace("ß", "SS")
    )
    candidates = [
        base[:3],
        base[:2] + base[-1],
        base[0] + base[2:4],
        base[:2] + str(len(used) % 10),
    ]
    for c in candidates:
        c = c[:3].ljust(3, "X")
        if c not in used:
            used.add(c)
            return c
    # Fallback: alphanumerisch
    while True:
        c = "".join(rng.choices(string.ascii_uppercase, k=3))
        if c not in used:
            used.add(c)
            return c


class DatasetGenerator:
    """Generiert zufällige Datensätze auf Basis eines TimetableConfig."""

    def __init__(
        self, config: Optional[TimetableConfig] = None, seed: Optional[int] = None
    ) -> None:
        self.config = config or default_timetable_config()
        self.rng = random.Random(seed)
        self._used_abbreviations: set[str] = set()

    # ─── Fächer / Klassen ─────────────────────────────────────────────────────

    def _generate_subjects(self) -> list[Subject]:
        return [
            Subject(id=i, name=name, code=code)
            for i, (name, code, _) in enumerate(_SUBJECTS, 1)
        ]

    def _generate_classes(self, num_classes: int) -> list[SchoolClass]:
        return [
            SchoolClass(id=i, name=f"Klasse {5 + (i - 1) // 3}{'abc'[(i - 1) % 3]}")
            for i in range(1, num_classes + 1)
        ]

    def _generate_workloads(
        self, classes: list[SchoolClass], subjects: list[Subject]
    ) -> list[WorkloadRequirement]:
        """Stundentafel je Klasse, gekürzt auf die belegbaren Slots."""
        slots = self.config.days_per_week * len(self.config.teaching_periods)
        workloads = []
        for cls in classes:
            used = 0
            for subject, (_, _, hours) in zip(subjects, _SUBJECTS):
                hours = min(hours, slots - used)
                if hours <= 0:
                    break
                used += hours
                workloads.append(WorkloadRequirement(
                    class_id=cls.id, subject_id=subject.id, periods_per_week=hours,
                ))
        return workloads

    # ─── Lehrkräfte ───────────────────────────────────────────────────────────

    def _make_teacher(self, teacher_id: int) -> Teacher:
        """Erstellt eine Lehrkraft mit zufälligem Namen und Limits."""
        first = self.rng.choice(_FIRST_NAMES)
        last = self.rng.choice(_LAST_NAMES)
        abbr = _make_abbreviation(last, self._used_abbreviations, self.rng)
        max_per_day = self.rng.choice([4, 5])
        return Teacher(
            id=teacher_id,
            name=f"{last}, {first}",
            code=abbr,
            max_per_day=max_per_day,
            max_per_week=self.rng.choice([18, 22, 26]),
            avoid_consecutive=self.rng.random() < 0.2,
        )

    def _generate_capabilities(
        self, teachers: list[Teacher], subjects: list[Subject]
    ) -> list[Capability]:
        """Zwei Fächerpaare pro Lehrkraft, reihum verteilt (plus Zufallsfach).

        Ab 4 Lehrkräften hat jedes Fach mindestens zwei befähigte Lehrkräfte.
        """
        n = len(subjects)
        pairs: set[tuple[int, int]] = set()
        for i, teacher in enumerate(teachers):
            for offset in (0, n // 2):
                pairs.add((teacher.id, subjects[(2 * i + offset) % n].id))
                pairs.add((teacher.id, subjects[(2 * i + 1 + offset) % n].id))
            if self.rng.random() < 0.3:
                pairs.add((teacher.id, self.rng.choice(subjects).id))
        return [
            Capability(teacher_id=t, subject_id=s) for t, s in sorted(pairs)
        ]

    def _generate_availability(self, teachers: list[Teacher]) -> list[AvailabilitySlot]:
        """Volle Verfügbarkeit; jede Lehrkraft hat 0–3 gesperrte Zellen."""
        cells = [
            (d, p)
            for d in range(self.config.days_per_week)
            for p in self.config.teaching_periods
        ]
        availability = []
        for teacher in teachers:
            blocked = set(self.rng.sample(cells, k=min(len(cells), self.rng.randint(0, 3))))
            for d, p in cells:
                availability.append(AvailabilitySlot(
                    teacher_id=teacher.id, day=d, period=p,
                    available=(d, p) not in blocked,
                ))
        return availability

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self, num_teachers: int = 8, num_classes: int = 3) -> Dataset:
        """Erzeugt den vollständigen Datensatz als Dataset-Objekt."""
        subjects = self._generate_subjects()
        classes = self._generate_classes(num_classes)
        teachers = [self._make_teacher(i) for i in range(1, num_teachers + 1)]
        return Dataset(
            config=self.config,
            teachers=teachers,
            subjects=subjects,
            classes=classes,
            workloads=self._generate_workloads(classes, subjects),
            capabilities=self._generate_capabilities(teachers, subjects),
            availability=self._generate_availability(teachers),
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: Dataset) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        print_dataset_summary(data, title="Erzeugte Testdaten")


def print_dataset_summary(data: Dataset, title: str = "Datensatz") -> None:
    """Rich-Tabelle mit Kennzahlen eines Datensatzes."""
    from rich.console import Console
    from rich.table import Table
    from rich import box

    console = Console()
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Kategorie", style="bold cyan")
    table.add_column("Anzahl", justify="right")
    table.add_column("Details")

    blocked = sum(1 for a in data.availability if not a.available)
    avoid = sum(1 for t in data.teachers if t.avoid_consecutive)
    need = sum(w.periods_per_week for w in data.workloads)
    table.add_row("Fächer", str(len(data.subjects)), "")
    table.add_row("Klassen", str(len(data.classes)), "")
    table.add_row("Lehrkräfte", str(len(data.teachers)),
                  f"{avoid} ohne Folgestunden")
    table.add_row("Stundenbedarf", str(len(data.workloads)), f"{need}h/Woche")
    table.add_row("Lehrbefähigungen", str(len(data.capabilities)), "")
    table.add_row("Verfügbarkeit", str(len(data.availability)),
                  f"{blocked} gesperrt")

    console.print(table)
