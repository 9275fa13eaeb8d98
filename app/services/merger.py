import logging
from typing import Any, Optional

from app.domain.pokemon import PokemonDraft, PokemonStatsDraft


logger = logging.getLogger(__name__)

def _is_present(value: Any) -> bool:
    """A field counts as supplied unless it is None or a blank string. Zero is a value."""
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def needs_enrichment(candidate: PokemonDraft) -> bool:
    """A named candidate is looked up unless it already carries both sprite and pokeApiId."""
    if not _is_present(candidate.name):
        return False
    return not (_is_present(candidate.sprite) and candidate.poke_api_id is not None)


def overlay_stats(
    preferred: Optional[PokemonStatsDraft],
    fallback: Optional[PokemonStatsDraft],
) -> Optional[PokemonStatsDraft]:
    if preferred is None:
        return fallback
    if fallback is None:
        return preferred
    merged = {
        field: getattr(preferred, field) if _is_present(getattr(preferred, field)) else getattr(fallback, field)
        for field in PokemonStatsDraft.model_fields
    }
    return PokemonStatsDraft(**merged)


def overlay(preferred: PokemonDraft, fallback: PokemonDraft) -> PokemonDraft:
    """
    Field-wise overlay of two partial records.

    Every top-level field supplied in ``preferred`` wins; absent fields
    fall back to ``fallback``. ``stats`` is overlaid the same way, one
    sub-field at a time.

    Args:
        preferred (PokemonDraft): Locally supplied values.
        fallback (PokemonDraft): Values to use where nothing was supplied.

    Returns:
        PokemonDraft: A new draft; neither input is modified.
    """
    merged: dict[str, Any] = {}
    for field in PokemonDraft.model_fields:
        if field == "stats":
            continue
        value = getattr(preferred, field)
        merged[field] = value if _is_present(value) else getattr(fallback, field)
    merged["stats"] = overlay_stats(preferred.stats, fallback.stats)
    return PokemonDraft(**merged)


def merge_with_source(candidate: PokemonDraft, fetched: Optional[PokemonDraft]) -> PokemonDraft:
    """Combines a client candidate with its PokeAPI record; the candidate takes precedence."""
    if fetched is None:
        return candidate
    merged = overlay(candidate, fetched)
    logger.info(f"Enhanced {merged.name} with PokeAPI data")
    return merged
