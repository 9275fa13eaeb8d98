# 1. Standard Library
from collections.abc import Generator
from typing import Any, Optional

# 2. Third-Party Libraries
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# 3. Application Layers
from app.api.main import app
from app.data_access.database import get_session
from app.data_access.models import PokemonRecord
from app.services.pokeapi_client import PokeApiClient, get_pokeapi_client
from app.services.pokemon_service import PokemonService


def pokeapi_payload(
    name: str,
    pokemon_id: int,
    types: list[str],
    abilities: list[str],
    stats: dict[str, int],
    height: int = 10,
    weight: int = 100,
) -> dict[str, Any]:
    """Builds a trimmed-down PokeAPI /pokemon/{name} response body."""
    return {
        "id": pokemon_id,
        "name": name,
        "height": height,
        "weight": weight,
        "types": [{"slot": i + 1, "type": {"name": t}} for i, t in enumerate(types)],
        "abilities": [{"ability": {"name": a}, "is_hidden": False} for a in abilities],
        "stats": [{"base_stat": value, "stat": {"name": key}} for key, value in stats.items()],
        "sprites": {
            "front_default": f"https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/{pokemon_id}.png"
        },
        "species": {"name": name},
    }


POKEAPI_DATA = {
    "pikachu": pokeapi_payload(
        "pikachu", 25, ["electric"], ["static", "lightning-rod"],
        {"hp": 35, "attack": 55, "defense": 40, "special-attack": 50, "special-defense": 50, "speed": 90},
        height=4, weight=60,
    ),
    "charizard": pokeapi_payload(
        "charizard", 6, ["fire", "flying"], ["blaze", "solar-power"],
        {"hp": 78, "attack": 84, "defense": 78, "special-attack": 109, "special-defense": 85, "speed": 100},
        height=17, weight=905,
    ),
    "bulbasaur": pokeapi_payload(
        "bulbasaur", 1, ["grass", "poison"], ["overgrow", "chlorophyll"],
        {"hp": 45, "attack": 49, "defense": 49, "special-attack": 65, "special-defense": 65, "speed": 45},
        height=7, weight=69,
    ),
    # Only HP is reported and the species block is missing
    "unown": {
        "id": 201,
        "name": "unown",
        "height": 5,
        "weight": 50,
        "types": [{"slot": 1, "type": {"name": "psychic"}}],
        "abilities": [{"ability": {"name": "levitate"}}],
        "stats": [{"base_stat": 48, "stat": {"name": "hp"}}],
        "sprites": {"front_default": None},
    },
    # Missing every required key
    "missingno": {"name": "missingno"},
}


class FakePokeApi:
    """httpx transport handler standing in for https://pokeapi.co."""

    def __init__(self) -> None:
        self.requested: list[str] = []
        self.offline = False
        self.status_override: Optional[int] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requested.append(request.url.path)
        if self.offline:
            raise httpx.ConnectTimeout("timed out", request=request)
        if self.status_override is not None:
            return httpx.Response(self.status_override, text="upstream error")

        name = request.url.path.rsplit("/", 1)[-1]
        if name not in POKEAPI_DATA:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, json=POKEAPI_DATA[name])


def make_record(name: str, type: str, abilities: str = "run-away", **kwargs: Any) -> PokemonRecord:
    fields: dict[str, Any] = {"height": 10, "weight": 100}
    fields.update(kwargs)
    return PokemonRecord(name=name, type=type, abilities=abilities, **fields)


# --- Setup: Isolated Testing Environment ---

@pytest.fixture(name="fake_pokeapi")
def fake_pokeapi_fixture() -> FakePokeApi:
    return FakePokeApi()

@pytest.fixture(name="pokeapi")
def pokeapi_fixture(fake_pokeapi: FakePokeApi) -> Generator[PokeApiClient, None, None]:
    client = PokeApiClient(
        httpx.Client(
            base_url="https://pokeapi.test/api/v2",
            transport=httpx.MockTransport(fake_pokeapi),
        )
    )
    yield client
    client.close()

@pytest.fixture(name="session")
def session_fixture() -> Generator[Session, None, None]:
    """
    Creates a clean, in-memory SQLite database for every test.
    StaticPool keeps the single connection alive across TestClient threads.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()

@pytest.fixture(name="service")
def service_fixture(session: Session, pokeapi: PokeApiClient) -> PokemonService:
    return PokemonService(session, pokeapi)

@pytest.fixture(name="client")
def client_fixture(session: Session, pokeapi: PokeApiClient) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_pokeapi_client] = lambda: pokeapi
    yield TestClient(app)
    app.dependency_overrides.clear()
