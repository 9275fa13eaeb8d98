import math
from typing import Any, Optional

from pydantic import BaseModel, Field
from sqlmodel import col, or_

# Layer 4: Data Access
from app.data_access.models import PokemonRecord


# Wire names (and python names) accepted by ``sort``
SORTABLE_COLUMNS: dict[str, Any] = {
    "id": PokemonRecord.id,
    "name": PokemonRecord.name,
    "type": PokemonRecord.type,
    "height": PokemonRecord.height,
    "weight": PokemonRecord.weight,
    "abilities": PokemonRecord.abilities,
    "sprite": PokemonRecord.sprite,
    "pokeApiId": PokemonRecord.poke_api_id,
    "poke_api_id": PokemonRecord.poke_api_id,
    "description": PokemonRecord.description,
    "category": PokemonRecord.category,
    "createdAt": PokemonRecord.created_at,
    "created_at": PokemonRecord.created_at,
    "updatedAt": PokemonRecord.updated_at,
    "updated_at": PokemonRecord.updated_at,
    "stats.hp": PokemonRecord.hp,
    "stats.attack": PokemonRecord.attack,
    "stats.defense": PokemonRecord.defense,
    "stats.speed": PokemonRecord.speed,
}

def _contains(column: Any, term: str) -> Any:
    """Case-insensitive substring match; LIKE wildcards in ``term`` are taken literally."""
    return col(column).icontains(term, autoescape=True)


class PokemonQuery(BaseModel):
    """
    Request-level listing parameters and their translation into a store query.

    Attributes:
        search (Optional[str]): Substring matched against name, type or abilities.
        type (Optional[str]): Substring matched against type, intersected with ``search``.
        limit (int): Page size, at least 1. Not capped.
        page (int): 1-based page number.
        sort (str): Single ascending sort field.
    """
    search: Optional[str] = None
    type: Optional[str] = None
    limit: int = Field(50, ge=1)
    page: int = Field(1, ge=1)
    sort: str = "name"

    def filters(self) -> list[Any]:
        """Returns the WHERE clauses; the store ANDs them together."""
        clauses = []
        if self.search:
            clauses.append(or_(
                _contains(PokemonRecord.name, self.search),
                _contains(PokemonRecord.type, self.search),
                _contains(PokemonRecord.abilities, self.search),
            ))
        if self.type:
            clauses.append(_contains(PokemonRecord.type, self.type))
        return clauses

    def order_by(self) -> Any:
        """Ascending on the requested field.

        A field no record has sorts every record as equal, which leaves
        them in store order.
        """
        column = SORTABLE_COLUMNS.get(self.sort, PokemonRecord.id)
        return col(column).asc()

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit)
