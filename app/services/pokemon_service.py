import logging
from datetime import UTC, datetime
from typing import Any, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, func, select

from app.core.errors import RecordValidationError

# Layer 4: Data Access
from app.data_access.models import PokemonRecord

# Layer 3: Domain Entities
from app.domain.pokemon import (
    AverageStats,
    CatalogStats,
    PokemonDomain,
    PokemonDraft,
    PokemonPage,
    PokemonRead,
    PokemonStats,
)

# Layer 2: Supporting Services
from app.services.merger import merge_with_source, needs_enrichment, overlay
from app.services.pokeapi_client import EnrichmentSourceError, PokeApiClient
from app.services.query_builder import PokemonQuery


logger = logging.getLogger(__name__)

# Largest id the record store can hold (signed 64-bit INTEGER)
MAX_RECORD_ID = 2**63 - 1

class PokemonService:
    """
    Service layer for the Pokemon catalog.

    Orchestrates the query builder, the PokeAPI enrichment merge and the
    record store, and translates every expected failure into an
    ``HTTPException`` with the status code of the catalog's error table.
    """

    def __init__(self, session: Session, source: PokeApiClient) -> None:
        """
        Initializes the PokemonService.

        Args:
            session (Session): The active SQLModel session for this request.
            source (PokeApiClient): Client for the PokeAPI enrichment source.
        """
        self.session = session
        self.source = source

    # --- 1. LAYERED MAPPING HELPERS ---

    def _map_to_domain(self, record: PokemonRecord) -> PokemonRead:
        """Converts a flat database row into the nested API representation."""
        return PokemonRead(
            id=record.id,
            name=record.name,
            type=record.type,
            height=record.height,
            weight=record.weight,
            abilities=record.abilities,
            stats=PokemonStats(
                hp=record.hp,
                attack=record.attack,
                defense=record.defense,
                speed=record.speed,
            ),
            sprite=record.sprite,
            poke_api_id=record.poke_api_id,
            description=record.description,
            category=record.category,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    @staticmethod
    def _to_columns(domain: PokemonDomain) -> dict[str, Any]:
        """Flattens a validated domain record into PokemonRecord columns."""
        data = domain.model_dump(include=set(PokemonDomain.model_fields) - {"stats"})
        data.update(domain.stats.model_dump())
        return data

    @staticmethod
    def _validate(draft: PokemonDraft) -> PokemonDomain:
        """
        Validates a final set of field values against the catalog schema.

        Raises:
            RecordValidationError: 400 with one message per violated field.
        """
        try:
            return PokemonDomain.model_validate(draft.model_dump(exclude_none=True))
        except ValidationError as e:
            raise RecordValidationError.from_pydantic(e)

    def _parse_id(self, pokemon_id: str) -> int:
        try:
            value = int(pokemon_id)
        except (TypeError, ValueError):
            value = 0
        if value < 1 or value > MAX_RECORD_ID:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid Pokemon ID format"
            )
        return value

    def _get_record_or_404(self, pokemon_id: str) -> PokemonRecord:
        """
        Internal helper to retrieve a Pokemon row or raise.

        Raises:
            HTTPException: 400 if the id is malformed, 404 if no such Pokemon exists.
        """
        record_id = self._parse_id(pokemon_id)
        try:
            record = self.session.get(PokemonRecord, record_id)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching Pokemon {record_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server error while fetching Pokemon"
            )
        if not record:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Pokemon not found"
            )
        return record

    def _persist(self, record: PokemonRecord, operation: str) -> PokemonRecord:
        """Commits a new or changed row, mapping storage failures onto the error table."""
        try:
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Duplicate Pokemon rejected by the store: {e}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Pokemon with this name already exists"
            )
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error while {operation}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Server error while {operation}"
            )
        logger.info(f"Pokemon saved: {record.name.capitalize()} ({record.type})")
        return record

    def _find_record_by_name(self, name: str) -> Optional[PokemonRecord]:
        statement = select(PokemonRecord).where(PokemonRecord.name == name.strip().lower())
        return self.session.exec(statement).first()

    def _ensure_name_available(self, name: str, operation: str) -> None:
        try:
            existing = self._find_record_by_name(name)
        except SQLAlchemyError as e:
            logger.error(f"Error checking for an existing Pokemon {name}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Server error while {operation}"
            )
        if existing is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Pokemon already exists in database"
            )

    # --- 2. ENRICHMENT SOURCE ACCESS ---

    def _lookup_for_merge(self, name: str) -> Optional[PokemonDraft]:
        """Create-time lookup: any PokeAPI failure degrades to 'no data'."""
        try:
            return self.source.fetch_pokemon(name)
        except EnrichmentSourceError as e:
            logger.warning(f"Continuing without PokeAPI data for {name}: {e}")
            return None

    def _lookup_or_raise(self, name: str) -> PokemonDraft:
        """Lookup for operations whose whole purpose is the PokeAPI data."""
        try:
            fetched = self.source.fetch_pokemon(name)
        except EnrichmentSourceError as e:
            logger.error(f"PokeAPI lookup failed for {name}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="PokeAPI is unavailable"
            )
        if fetched is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Pokemon not found in PokeAPI"
            )
        return fetched

    # --- 3. FULL CRUD OPERATIONS ---

    def list_pokemon(self, query: PokemonQuery) -> PokemonPage:
        """
        Retrieves one page of Pokemon matching the search and type filters.

        Args:
            query (PokemonQuery): Filter, sort and pagination parameters.

        Returns:
            PokemonPage: The page plus the total match count and page count.
        """
        filters = query.filters()
        statement = (
            select(PokemonRecord)
            .where(*filters)
            .order_by(query.order_by())
            .offset(query.skip)
            .limit(query.limit)
        )
        count_statement = select(func.count()).select_from(PokemonRecord).where(*filters)

        try:
            records = self.session.exec(statement).all()
            total = self.session.exec(count_statement).one()
        except SQLAlchemyError as e:
            logger.error(f"Error in list_pokemon: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server error while fetching Pokemon"
            )

        pokemon = [self._map_to_domain(r) for r in records]
        return PokemonPage(
            count=len(pokemon),
            total=total,
            page=query.page,
            total_pages=query.total_pages(total),
            pokemon=pokemon,
        )

    def get_pokemon(self, pokemon_id: str) -> PokemonRead:
        return self._map_to_domain(self._get_record_or_404(pokemon_id))

    def get_pokemon_by_name(self, name: str) -> Optional[PokemonRead]:
        """Looks a Pokemon up by its natural key, ignoring case and surrounding spaces."""
        try:
            record = self._find_record_by_name(name)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching Pokemon {name}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server error while fetching Pokemon"
            )
        return self._map_to_domain(record) if record else None

    def create_pokemon(self, draft: PokemonDraft) -> PokemonRead:
        """
        Creates a Pokemon, filling gaps from PokeAPI when sprite or pokeApiId is missing.

        The existence check and the insert are two separate statements, so
        two concurrent creates of the same name can both succeed.

        Args:
            draft (PokemonDraft): The client payload; ``name`` is required.

        Returns:
            PokemonRead: The stored record.

        Raises:
            HTTPException: 400 if the name already exists.
            RecordValidationError: 400 if the final record violates the schema.
        """
        if not draft.name or not draft.name.strip():
            raise RecordValidationError(["name: Pokemon name is required"])

        self._ensure_name_available(draft.name, "creating Pokemon")

        if needs_enrichment(draft):
            draft = merge_with_source(draft, self._lookup_for_merge(draft.name))

        domain = self._validate(draft)
        record = self._persist(PokemonRecord(**self._to_columns(domain)), "creating Pokemon")
        return self._map_to_domain(record)

    def update_pokemon(self, pokemon_id: str, draft: PokemonDraft) -> PokemonRead:
        """
        Applies a partial update and re-validates the whole record.

        Supplied fields replace stored ones; ``stats`` is updated per sub-field.

        Raises:
            HTTPException: 400 for a malformed id, 404 if the Pokemon does not exist.
            RecordValidationError: 400 if the updated record violates the schema.
        """
        record = self._get_record_or_404(pokemon_id)
        current = PokemonDraft.model_validate(self._map_to_domain(record).model_dump())
        domain = self._validate(overlay(draft, current))

        for key, value in self._to_columns(domain).items():
            setattr(record, key, value)
        record.updated_at = datetime.now(UTC)

        return self._map_to_domain(self._persist(record, "updating Pokemon"))

    def delete_pokemon(self, pokemon_id: str) -> PokemonRead:
        """Removes a Pokemon and echoes the deleted record back."""
        record = self._get_record_or_404(pokemon_id)
        deleted = self._map_to_domain(record)
        logger.info(f"Removing Pokemon: {deleted.display_name}")
        try:
            self.session.delete(record)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error in delete_pokemon: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server error while deleting Pokemon"
            )
        return deleted

    # --- 4. POKEAPI-BACKED OPERATIONS ---

    def import_pokemon(self, name: str) -> PokemonRead:
        """
        Fetches a Pokemon from PokeAPI and stores it.

        The existence check runs before any PokeAPI request is made.

        Raises:
            HTTPException: 400 if the name exists, 404 if PokeAPI does not know it,
                500 if PokeAPI cannot be reached.
        """
        slug = name.strip().lower()
        self._ensure_name_available(slug, "importing Pokemon")
        domain = self._validate(self._lookup_or_raise(slug))
        record = self._persist(PokemonRecord(**self._to_columns(domain)), "importing Pokemon")
        return self._map_to_domain(record)

    def search_source(self, name: str) -> PokemonDraft:
        """Returns the PokeAPI record for ``name`` without writing anything."""
        return self._lookup_or_raise(name)

    # --- 5. CATALOG AGGREGATES ---

    def list_types(self) -> list[str]:
        """Distinct type tags across all records, split from their comma-joined strings."""
        try:
            type_strings = self.session.exec(select(PokemonRecord.type).distinct()).all()
        except SQLAlchemyError as e:
            logger.error(f"Error in list_types: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server error while fetching Pokemon types"
            )

        tags = set()
        for type_string in type_strings:
            if not type_string:
                continue
            tags.update(t.strip() for t in type_string.split(",") if t.strip())
        return sorted(tags)

    def get_stats(self) -> CatalogStats:
        """Record count, distinct type count and the mean of every stat, height and weight."""
        averages = select(
            func.avg(PokemonRecord.hp),
            func.avg(PokemonRecord.attack),
            func.avg(PokemonRecord.defense),
            func.avg(PokemonRecord.speed),
            func.avg(PokemonRecord.height),
            func.avg(PokemonRecord.weight),
        )
        try:
            total = self.session.exec(select(func.count()).select_from(PokemonRecord)).one()
            row = self.session.exec(averages).one()
        except SQLAlchemyError as e:
            logger.error(f"Error in get_stats: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server error while fetching Pokemon statistics"
            )

        # AVG over an empty table is NULL
        avg_hp, avg_attack, avg_defense, avg_speed, avg_height, avg_weight = (
            float(v) if v is not None else 0.0 for v in row
        )
        return CatalogStats(
            total_pokemon=total,
            total_types=len(self.list_types()),
            average_stats=AverageStats(
                avg_hp=avg_hp,
                avg_attack=avg_attack,
                avg_defense=avg_defense,
                avg_speed=avg_speed,
                avg_height=avg_height,
                avg_weight=avg_weight,
            ),
        )
