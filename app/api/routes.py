from datetime import UTC, datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

# Security
from app.api.auth import authenticate
from app.core.config import settings

# Layer 4: Data Access (Session)
from app.data_access.database import get_session

# Layer 3: Domain Entities (Pydantic models)
from app.domain.pokemon import PokemonDraft
from app.domain.responses import (
    ErrorResponse,
    HealthResponse,
    PokemonListResponse,
    PokemonResponse,
    SeedResponse,
    SourcePokemonResponse,
    StatsResponse,
    TypesResponse,
)

# Layer 2: Services
from app.services.pokeapi_client import PokeApiClient, get_pokeapi_client
from app.services.pokemon_service import PokemonService
from app.services.query_builder import PokemonQuery
from app.services.seed_service import SeedService


router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)

SessionDep = Annotated[Session, Depends(get_session)]
SourceDep = Annotated[PokeApiClient, Depends(get_pokeapi_client)]

# --- 1. HEALTH & ADMIN ---
@router.get("/health", tags=["Health"])
def health_check() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(
        message="Pokedex API is running!",
        timestamp=datetime.now(UTC),
        environment=settings.ENVIRONMENT,
    )

@router.post("/seed", tags=["Admin"])
def seed_database(
    session: SessionDep,
    source: SourceDep,
    username: Annotated[str, Depends(authenticate)],
    reset: bool = False,
) -> SeedResponse:
    """Imports the popular Pokemon starter set from PokeAPI.
    With ``reset=true`` the catalog is emptied first.
    """
    service = SeedService(session, source)
    report = service.seed(reset=reset, delay=settings.SEED_REQUEST_DELAY)
    return SeedResponse(message=f"Seeded {len(report.imported)} Pokemon", data=report)


# --- 2. CATALOG AGGREGATES (declared before /pokemon/{pokemon_id}) ---
@router.get("/pokemon/types", tags=["Pokemon"])
def get_pokemon_types(session: SessionDep, source: SourceDep) -> TypesResponse:
    """Sorted distinct type tags across the catalog."""
    types = PokemonService(session, source).list_types()
    return TypesResponse(count=len(types), data=types)

@router.get("/pokemon/stats", tags=["Pokemon"])
def get_pokemon_stats(session: SessionDep, source: SourceDep) -> StatsResponse:
    """Record count, type count and average stats."""
    return StatsResponse(data=PokemonService(session, source).get_stats())


# --- 3. POKEAPI ---
@router.get("/pokemon/search/{name}", tags=["PokeAPI"])
def search_pokemon_in_api(name: str, session: SessionDep, source: SourceDep) -> SourcePokemonResponse:
    """Looks a Pokemon up in PokeAPI without saving it."""
    return SourcePokemonResponse(data=PokemonService(session, source).search_source(name))

@router.post("/pokemon/import/{name}", tags=["PokeAPI"], status_code=status.HTTP_201_CREATED)
def import_pokemon_from_api(name: str, session: SessionDep, source: SourceDep) -> PokemonResponse:
    """Fetches a Pokemon from PokeAPI and saves it to the catalog."""
    pokemon = PokemonService(session, source).import_pokemon(name)
    return PokemonResponse(message="Pokemon imported successfully from PokeAPI", data=pokemon)


# --- 4. POKEMON MANAGEMENT (CRUD) ---
@router.get("/pokemon", tags=["Pokemon"])
def list_pokemon(
    session: SessionDep,
    source: SourceDep,
    search: Annotated[Optional[str], Query(description="Substring of name, type or abilities")] = None,
    pokemon_type: Annotated[Optional[str], Query(alias="type", description="Substring of type")] = None,
    limit: Annotated[int, Query(ge=1)] = 50,
    page: Annotated[int, Query(ge=1)] = 1,
    sort: Annotated[str, Query(description="Field to sort ascending by")] = "name",
) -> PokemonListResponse:
    """Paged listing with optional search and type filters."""
    query = PokemonQuery(search=search, type=pokemon_type, limit=limit, page=page, sort=sort)
    result = PokemonService(session, source).list_pokemon(query)
    return PokemonListResponse(**dict(result))

@router.get("/pokemon/{pokemon_id}", tags=["Pokemon"])
def get_pokemon(pokemon_id: str, session: SessionDep, source: SourceDep) -> PokemonResponse:
    return PokemonResponse(data=PokemonService(session, source).get_pokemon(pokemon_id))

@router.post("/pokemon", tags=["Pokemon"], status_code=status.HTTP_201_CREATED)
def create_pokemon(data: PokemonDraft, session: SessionDep, source: SourceDep) -> PokemonResponse:
    """Creates a Pokemon; missing sprite or pokeApiId triggers a PokeAPI merge."""
    pokemon = PokemonService(session, source).create_pokemon(data)
    return PokemonResponse(message="Pokemon created successfully", data=pokemon)

@router.put("/pokemon/{pokemon_id}", tags=["Pokemon"])
def update_pokemon(
    pokemon_id: str,
    data: PokemonDraft,
    session: SessionDep,
    source: SourceDep,
) -> PokemonResponse:
    """Partial update; the resulting record is validated again."""
    pokemon = PokemonService(session, source).update_pokemon(pokemon_id, data)
    return PokemonResponse(message="Pokemon updated successfully", data=pokemon)

@router.delete("/pokemon/{pokemon_id}", tags=["Pokemon"])
def delete_pokemon(pokemon_id: str, session: SessionDep, source: SourceDep) -> PokemonResponse:
    pokemon = PokemonService(session, source).delete_pokemon(pokemon_id)
    return PokemonResponse(message="Pokemon deleted successfully", data=pokemon)
