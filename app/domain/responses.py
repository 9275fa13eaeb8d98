from datetime import datetime
from typing import Optional

from app.domain.pokemon import CamelModel, CatalogStats, PokemonDraft, PokemonPage, PokemonRead


class PokemonResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: PokemonRead


class SourcePokemonResponse(CamelModel):
    """Enrichment-shaped record fetched from PokeAPI, never persisted."""
    success: bool = True
    data: PokemonDraft


class PokemonListResponse(PokemonPage):
    success: bool = True


class TypesResponse(CamelModel):
    success: bool = True
    count: int
    data: list[str]


class StatsResponse(CamelModel):
    success: bool = True
    data: CatalogStats


class SeedReport(CamelModel):
    imported: list[str]
    skipped: list[str]
    failed: list[str]


class SeedResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: SeedReport


class HealthResponse(CamelModel):
    success: bool = True
    message: str
    timestamp: datetime
    environment: str


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    details: Optional[list[str]] = None
