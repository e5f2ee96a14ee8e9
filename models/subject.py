"""Datenmodell für ein Unterrichtsfach (Pydantic v2)."""

from pydantic import BaseModel


class Subject(BaseModel):
    """Repräsentiert ein Unterrichtsfach."""

    id: int
    name: str       # "Mathematics"
    code: str       # "MATH"
