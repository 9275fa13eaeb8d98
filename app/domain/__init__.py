# app/domain/__init__.py

# 1. The Catalog Entity and its partial shapes
from .pokemon import (
    PokemonDomain,
    PokemonDraft,
    PokemonRead,
    PokemonStats,
    PokemonStatsDraft,
)

# 2. Listing & Aggregates
from .pokemon import AverageStats, CatalogStats, PokemonPage

# 3. API Envelopes
from .responses import (
    ErrorResponse,
    HealthResponse,
    PokemonListResponse,
    PokemonResponse,
    SeedReport,
    SeedResponse,
    SourcePokemonResponse,
    StatsResponse,
    TypesResponse,
)


__all__ = [
    "AverageStats",
    "CatalogStats",
    "ErrorResponse",
    "HealthResponse",
    "PokemonDomain",
    "PokemonDraft",
    "PokemonListResponse",
    "PokemonPage",
    "PokemonRead",
    "PokemonResponse",
    "PokemonStats",
    "PokemonStatsDraft",
    "SeedReport",
    "SeedResponse",
    "SourcePokemonResponse",
    "StatsResponse",
    "TypesResponse"
]
