import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, computed_field, field_validator
from pydantic.alias_generators import to_camel


SPRITE_PATTERN = re.compile(r"^https?://.+")
MAX_STAT = 255
STAT_LABELS = {"hp": "HP", "attack": "Attack", "defense": "Defense", "speed": "Speed"}

class CamelModel(BaseModel):
    """Base config for all API-facing entities: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# --- Partial shapes (explicit presence: None means "not supplied") ---

class PokemonStatsDraft(CamelModel):
    """Partially supplied base stats."""
    hp: Optional[int] = None
    attack: Optional[int] = None
    defense: Optional[int] = None
    speed: Optional[int] = None


class PokemonDraft(CamelModel):
    """A loosely typed Pokemon candidate.

    Used for create and update payloads and for records fetched from
    PokeAPI. Nothing is range-checked here; the full record is validated
    through ``PokemonDomain`` once the final field values are known.
    """
    name: Optional[str] = None
    type: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    abilities: Optional[str] = None
    stats: Optional[PokemonStatsDraft] = None
    sprite: Optional[str] = None
    poke_api_id: Optional[int] = None
    description: Optional[str] = None
    category: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Pikachu",
                "type": "electric",
                "height": 4,
                "weight": 60,
                "abilities": "static, lightning-rod",
                "stats": {"hp": 35, "attack": 55, "defense": 40, "speed": 90},
            }
        },
    )


# --- Validated record ---

class PokemonStats(CamelModel):
    hp: int = Field(0, description="Base HP, 0-255")
    attack: int = Field(0, description="Base Attack, 0-255")
    defense: int = Field(0, description="Base Defense, 0-255")
    speed: int = Field(0, description="Base Speed, 0-255")

    @field_validator("hp", "attack", "defense", "speed")
    @classmethod
    def check_stat_range(cls, v: int, info: ValidationInfo) -> int:
        label = STAT_LABELS[info.field_name]
        if v < 0:
            raise ValueError(f"{label} must be a positive number")
        if v > MAX_STAT:
            raise ValueError(f"{label} cannot exceed {MAX_STAT}")
        return v

    @property
    def total(self) -> int:
        return self.hp + self.attack + self.defense + self.speed


class PokemonDomain(CamelModel):
    """
    The pure domain representation of a Pokemon catalog entry.

    Every write goes through this model, so its constraints are the
    schema of the catalog. Violations are rejected, never clamped.

    Attributes:
        name (str): Lowercased, trimmed natural key (1-50 chars).
        type (str): Comma-separated type tags, e.g. "fire, flying".
        height (float): Non-negative height (PokeAPI decimetres).
        weight (float): Non-negative weight (PokeAPI hectograms).
        abilities (str): Comma-separated ability names.
        stats (PokemonStats): Base stats, each within [0, 255].
        sprite (Optional[str]): Absolute http(s) URL of the front sprite.
        poke_api_id (Optional[int]): PokeAPI identifier, positive.
        description (Optional[str]): Free text, at most 500 chars.
        category (Optional[str]): Free text, at most 50 chars.
    """

    name: str = Field(..., description="Pokemon name, 1-50 chars")
    type: str = Field(..., description="Comma-separated type tags")
    height: float = Field(..., description="Height, non-negative")
    weight: float = Field(..., description="Weight, non-negative")
    abilities: str = Field(..., description="Comma-separated abilities")
    stats: PokemonStats = Field(default_factory=PokemonStats)
    sprite: Optional[str] = Field(None, description="Sprite image URL")
    poke_api_id: Optional[int] = Field(None, description="PokeAPI identifier, positive")
    description: Optional[str] = Field(None, description="Free text, at most 500 chars")
    category: Optional[str] = Field(None, description="Free text, at most 50 chars")

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: Any) -> Any:
        """Stores names lowercased and trimmed regardless of input casing."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("type", "abilities", "description", "category", mode="before")
    @classmethod
    def trim_strings(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("name")
    @classmethod
    def check_name_length(cls, v: str) -> str:
        if len(v) < 1:
            raise ValueError("Pokemon name is required")
        if len(v) > 50:
            raise ValueError("Name cannot exceed 50 characters")
        return v

    @field_validator("type", "abilities")
    @classmethod
    def check_required_text(cls, v: str, info: ValidationInfo) -> str:
        if not v:
            label = "abilities are" if info.field_name == "abilities" else "type is"
            raise ValueError(f"Pokemon {label} required")
        return v

    @field_validator("height", "weight")
    @classmethod
    def check_non_negative(cls, v: float, info: ValidationInfo) -> float:
        if v < 0:
            raise ValueError(f"{info.field_name.capitalize()} must be a positive number")
        return v

    @field_validator("poke_api_id")
    @classmethod
    def check_poke_api_id(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("PokeAPI ID must be a positive number")
        return v

    @field_validator("description", "category")
    @classmethod
    def check_text_length(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        limit = 500 if info.field_name == "description" else 50
        if v is not None and len(v) > limit:
            raise ValueError(f"{info.field_name.capitalize()} cannot exceed {limit} characters")
        return v

    @field_validator("sprite", mode="before")
    @classmethod
    def validate_sprite(cls, v: Any) -> Any:
        """
        Validates that a supplied sprite is an absolute http(s) URL.

        Args:
            v (Any): The raw sprite value.

        Returns:
            Any: The sprite, or None when an empty string was supplied.

        Raises:
            ValueError: If the sprite is not an http(s) URL.
        """
        if v is None or v == "":
            return None
        if not isinstance(v, str) or not SPRITE_PATTERN.match(v):
            raise ValueError("Sprite must be a valid URL")
        return v

    def primary_type(self) -> str:
        return self.types_list()[0]

    def types_list(self) -> list[str]:
        return [t.strip() for t in self.type.split(",") if t.strip()]


class PokemonRead(PokemonDomain):
    """A stored Pokemon, as returned by the API."""
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="totalStats")
    @property
    def total_stats(self) -> int:
        return self.stats.total

    @computed_field(alias="displayName")
    @property
    def display_name(self) -> str:
        return self.name[:1].upper() + self.name[1:]


class PokemonPage(CamelModel):
    """One page of a filtered, sorted listing."""
    count: int
    total: int
    page: int
    total_pages: int
    pokemon: list[PokemonRead]


class AverageStats(CamelModel):
    avg_hp: float = 0.0
    avg_attack: float = 0.0
    avg_defense: float = 0.0
    avg_speed: float = 0.0
    avg_height: float = 0.0
    avg_weight: float = 0.0


class CatalogStats(CamelModel):
    total_pokemon: int
    total_types: int
    average_stats: AverageStats
