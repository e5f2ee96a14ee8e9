"""Datenmodell für einen Klassen-Slot im Wochenraster."""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Slot:
    """Eine belegbare (Tag, Stunde)-Zelle einer bestimmten Klasse.

    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    Sortierung (order=True) folgt (day, period, class_id).
    """

    # Wochentag (0=Montag, 1=Dienstag, ...)
    day: int
    # Stunden-Index (0-basiert, Mittagspause ist nie ein Slot)
    period: int
    # Klasse, zu der die Zelle gehört
    class_id: int

    @property
    def key(self) -> tuple[int, int, int]:
        """Schlüssel der Belegungstabelle: (day, period, class_id)."""
        return (self.day, self.period, self.class_id)

    def __str__(self) -> str:
        return f"Tag {self.day + 1}, Std. {self.period + 1} (Klasse {self.class_id})"
