"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from pydantic import BaseModel, Field, field_validator


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    id: int                                  # Stabile, eindeutige ID
    name: str                                # "Alice"
    code: str                                # Kürzel ("T-A")
    max_per_day: int = Field(4, ge=0)        # Obergrenze Stunden pro Tag
    max_per_week: int = Field(18, ge=0)      # Obergrenze Stunden pro Woche
    avoid_consecutive: bool = False          # Keine direkt aufeinanderfolgenden Stunden in derselben Klasse

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()
