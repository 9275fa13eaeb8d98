import logging
from typing import Any, Optional

import httpx
from fastapi import Request

from app.domain.pokemon import PokemonDraft, PokemonStatsDraft


logger = logging.getLogger(__name__)

STAT_NAMES = ("hp", "attack", "defense", "speed")

class EnrichmentSourceError(Exception):
    """PokeAPI could not be reached, timed out, or answered with a server error."""


class PokeApiClient:
    """Read-only client for the PokeAPI ``/pokemon/{name}`` resource.

    A single attempt is made per lookup. A miss (404 or an unusable
    payload) is reported as ``None``; a transport failure raises
    ``EnrichmentSourceError`` so that callers can choose whether to
    degrade or surface it.
    """

    def __init__(self, http: httpx.Client) -> None:
        """
        Args:
            http (httpx.Client): A client configured with the PokeAPI base URL and timeout.
        """
        self.http = http

    @classmethod
    def from_settings(cls, base_url: str, timeout: float) -> "PokeApiClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def close(self) -> None:
        self.http.close()

    def fetch_pokemon(self, name: str) -> Optional[PokemonDraft]:
        """
        Fetches canonical species data by name.

        Args:
            name (str): The Pokemon name; it is trimmed and lowercased before the query.

        Returns:
            Optional[PokemonDraft]: The normalized record, or None when PokeAPI has no such Pokemon.

        Raises:
            EnrichmentSourceError: If PokeAPI is unreachable, times out or fails.
        """
        slug = name.strip().lower()
        if not slug:
            return None

        logger.info(f"Fetching {slug} from PokeAPI...")
        try:
            response = self.http.get(f"/pokemon/{slug}")
        except httpx.TimeoutException as e:
            logger.warning(f"PokeAPI timed out for {slug}: {e}")
            raise EnrichmentSourceError(f"PokeAPI timed out for {slug}") from e
        except httpx.HTTPError as e:
            logger.warning(f"PokeAPI request failed for {slug}: {e}")
            raise EnrichmentSourceError(f"PokeAPI request failed for {slug}") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.info(f"{slug} not found in PokeAPI")
            return None
        if response.is_error:
            logger.warning(f"PokeAPI answered {response.status_code} for {slug}")
            raise EnrichmentSourceError(f"PokeAPI answered {response.status_code}")

        try:
            return self._normalize(response.json())
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed PokeAPI payload for {slug}: {e!r}")
            return None

    @staticmethod
    def _normalize(data: dict[str, Any]) -> PokemonDraft:
        """Maps a raw PokeAPI payload onto the catalog record shape."""
        base_stats = {s["stat"]["name"]: s.get("base_stat") for s in data.get("stats") or []}
        species = data.get("species") or {}

        return PokemonDraft(
            name=data["name"],
            type=", ".join(t["type"]["name"] for t in data["types"]),
            height=data["height"],
            weight=data["weight"],
            abilities=", ".join(a["ability"]["name"] for a in data["abilities"]),
            stats=PokemonStatsDraft(**{k: base_stats.get(k) or 0 for k in STAT_NAMES}),
            sprite=(data.get("sprites") or {}).get("front_default"),
            poke_api_id=data["id"],
            category=species.get("name") or "Unknown",
        )


def get_pokeapi_client(request: Request) -> PokeApiClient:
    """FastAPI dependency returning the client opened by the application lifespan."""
    return request.app.state.pokeapi
