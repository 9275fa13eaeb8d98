import argparse
import logging

from sqlmodel import Session, select

from app.core.config import settings
from app.data_access.database import build_engine, create_db_and_tables
from app.data_access.models import PokemonRecord
from app.services.pokeapi_client import PokeApiClient
from app.services.seed_service import POPULAR_POKEMON, SeedService


def seed_database(reset: bool = True) -> None:
    """Seeds the catalog in ``DATABASE_URL`` with the popular Pokemon from PokeAPI.

    Args:
        reset: Clear existing Pokemon first. Defaults to True.

    Note:
        PokeAPI is queried once per name with ``SEED_REQUEST_DELAY`` seconds
        between requests.
    """
    engine = build_engine(settings.DATABASE_URL)
    create_db_and_tables(engine)
    client = PokeApiClient.from_settings(settings.POKEAPI_BASE_URL, settings.POKEAPI_TIMEOUT)

    try:
        with Session(engine) as session:
            report = SeedService(session, client).seed(
                POPULAR_POKEMON, reset=reset, delay=settings.SEED_REQUEST_DELAY
            )
            print(f"Successfully seeded {len(report.imported)} Pokemon!")
            if report.failed:
                print(f"Failed: {', '.join(report.failed)}")

            print("\nSeeded Pokemon:")
            for pokemon in session.exec(select(PokemonRecord).order_by(PokemonRecord.name)).all():
                print(f"- {pokemon.name} ({pokemon.type})")
    finally:
        client.close()
        engine.dispose()
        print("\nDatabase connection closed")

if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(message)s")
    parser = argparse.ArgumentParser(description="Seed the Pokedex catalog from PokeAPI")
    parser.add_argument("--keep", action="store_true", help="keep existing Pokemon instead of clearing them")
    args = parser.parse_args()
    seed_database(reset=not args.keep)
