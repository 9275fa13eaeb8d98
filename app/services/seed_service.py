import logging
import time
from collections.abc import Iterable

from fastapi import HTTPException, status
from sqlmodel import Session, delete

from app.core.errors import RecordValidationError

# Layer 4: Data Access
from app.data_access.models import PokemonRecord

# Layer 3: Domain Entities
from app.domain.responses import SeedReport

# Layer 2: Services
from app.services.pokeapi_client import PokeApiClient
from app.services.pokemon_service import PokemonService


logger = logging.getLogger(__name__)

# Popular Pokemon to seed the database
POPULAR_POKEMON = (
    "pikachu", "charizard", "blastoise", "venusaur", "alakazam",
    "machamp", "gengar", "dragonite", "mewtwo", "mew",
    "typhlosion", "feraligatr", "meganium", "espeon", "umbreon",
    "blaziken", "swampert", "sceptile", "garchomp", "lucario",
    "greninja", "talonflame", "sylveon", "decidueye", "incineroar",
)

class SeedService:
    """Fills the catalog with a starter set of Pokemon imported from PokeAPI."""

    def __init__(self, session: Session, source: PokeApiClient) -> None:
        self.session = session
        self.pokemon_service = PokemonService(session, source)

    def _clear_catalog(self) -> None:
        self.session.execute(delete(PokemonRecord))
        self.session.commit()
        logger.info("Cleared existing Pokemon data")

    def seed(
        self,
        names: Iterable[str] = POPULAR_POKEMON,
        reset: bool = False,
        delay: float = 0.0,
    ) -> SeedReport:
        """
        Imports each name through the regular import path.

        Names already in the catalog are skipped; PokeAPI misses and
        failures are collected rather than aborting the run.

        Args:
            names (Iterable[str]): Pokemon names to import.
            reset (bool): Delete every stored Pokemon first.
            delay (float): Seconds to wait between PokeAPI requests.

        Returns:
            SeedReport: Imported, skipped and failed names.
        """
        if reset:
            self._clear_catalog()

        report = SeedReport(imported=[], skipped=[], failed=[])
        for index, name in enumerate(names):
            if index and delay:
                time.sleep(delay)
            try:
                created = self.pokemon_service.import_pokemon(name)
            except HTTPException as e:
                already_stored = e.status_code == status.HTTP_400_BAD_REQUEST
                if already_stored and not isinstance(e, RecordValidationError):
                    report.skipped.append(name)
                else:
                    logger.warning(f"Could not seed {name}: {e.detail}")
                    report.failed.append(name)
                continue
            report.imported.append(created.name)

        logger.info(
            f"Seeding finished: {len(report.imported)} imported, "
            f"{len(report.skipped)} skipped, {len(report.failed)} failed"
        )
        return report
