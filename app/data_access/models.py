from datetime import UTC, datetime
from typing import Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(UTC)

class PokemonRecord(SQLModel, table=True):
    """Physical row for one Pokemon catalog entry.

    The nested ``stats`` structure of the domain model is flattened into
    four columns. ``name`` is indexed but deliberately not unique: the
    natural key is only checked by the service before inserting.
    """
    __tablename__ = "pokemon"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=50)
    type: str = Field(index=True)
    height: float
    weight: float
    abilities: str

    # Flattened stats
    hp: int = 0
    attack: int = 0
    defense: int = 0
    speed: int = 0

    sprite: Optional[str] = None
    poke_api_id: Optional[int] = Field(default=None, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=50)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
