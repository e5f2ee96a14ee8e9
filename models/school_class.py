"""Datenmodell für eine Schulklasse (Pydantic v2)."""

from pydantic import BaseModel


class SchoolClass(BaseModel):
    """Repräsentiert eine Klasse (z.B. "Class A")."""

    id: int
    name: str
