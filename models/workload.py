"""Stundenbedarf, Lehrbefähigung und Verfügbarkeit (Pydantic v2)."""

from pydantic import BaseModel, Field


class WorkloadRequirement(BaseModel):
    """Wochenstunden, die eine Klasse in einem Fach bekommen muss.

    Pro (Klasse, Fach)-Paar genau ein Eintrag.
    """

    class_id: int
    subject_id: int
    periods_per_week: int = Field(ge=1)


class Capability(BaseModel):
    """Lehrkraft darf das Fach unterrichten.

    Ohne Eintrag ist die Lehrkraft für dieses Fach nie Kandidatin.
    """

    teacher_id: int
    subject_id: int


class AvailabilitySlot(BaseModel):
    """Verfügbarkeit einer Lehrkraft in einer (Tag, Stunde)-Zelle.

    Ein fehlender Eintrag gilt für den Solver als "nicht verfügbar";
    Dataset.with_default_availability() füllt fehlende Zellen auf.
    """

    teacher_id: int
    day: int          # 0-basiert (0=Mo)
    period: int       # 0-basiert
    available: bool = True
