from app.domain.pokemon import PokemonDraft, PokemonStatsDraft
from app.services.merger import merge_with_source, needs_enrichment, overlay


def fetched_pikachu() -> PokemonDraft:
    return PokemonDraft(
        name="pikachu",
        type="electric",
        height=4,
        weight=60,
        abilities="static, lightning-rod",
        stats=PokemonStatsDraft(hp=35, attack=55, defense=40, speed=90),
        sprite="https://img.example/25.png",
        poke_api_id=25,
        category="pikachu",
    )


# --- 1. When to enrich ---

def test_candidate_missing_sprite_needs_enrichment() -> None:
    assert needs_enrichment(PokemonDraft(name="pikachu", poke_api_id=25))

def test_candidate_missing_poke_api_id_needs_enrichment() -> None:
    assert needs_enrichment(PokemonDraft(name="pikachu", sprite="https://img.example/25.png"))

def test_fully_enriched_candidate_is_left_alone() -> None:
    candidate = PokemonDraft(name="pikachu", sprite="https://img.example/25.png", poke_api_id=25)
    assert not needs_enrichment(candidate)

def test_nameless_candidate_is_never_looked_up() -> None:
    assert not needs_enrichment(PokemonDraft(type="electric"))


# --- 2. Overlay precedence ---

def test_supplied_fields_win_and_gaps_are_filled() -> None:
    candidate = PokemonDraft(name="Pikachu", height=5, description="Mouse Pokemon")

    merged = merge_with_source(candidate, fetched_pikachu())

    assert merged.name == "Pikachu"
    assert merged.height == 5
    assert merged.description == "Mouse Pokemon"
    assert merged.type == "electric"
    assert merged.weight == 60
    assert merged.abilities == "static, lightning-rod"
    assert merged.poke_api_id == 25
    assert merged.sprite == "https://img.example/25.png"

def test_stats_are_overlaid_per_field() -> None:
    candidate = PokemonDraft(name="pikachu", stats=PokemonStatsDraft(hp=100, speed=0))

    merged = merge_with_source(candidate, fetched_pikachu())

    assert merged.stats.hp == 100
    # Zero is a supplied value, not a gap
    assert merged.stats.speed == 0
    assert merged.stats.attack == 55
    assert merged.stats.defense == 40

def test_blank_strings_count_as_absent() -> None:
    candidate = PokemonDraft(name="pikachu", type="   ", abilities="")

    merged = overlay(candidate, fetched_pikachu())

    assert merged.type == "electric"
    assert merged.abilities == "static, lightning-rod"

def test_candidate_without_stats_takes_fetched_stats() -> None:
    merged = overlay(PokemonDraft(name="pikachu"), fetched_pikachu())
    assert merged.stats == PokemonStatsDraft(hp=35, attack=55, defense=40, speed=90)

def test_missing_source_record_returns_candidate_unchanged() -> None:
    candidate = PokemonDraft(name="pikachu", type="electric")
    assert merge_with_source(candidate, None) is candidate

def test_overlay_does_not_modify_inputs() -> None:
    candidate = PokemonDraft(name="pikachu", stats=PokemonStatsDraft(hp=1))
    fetched = fetched_pikachu()

    overlay(candidate, fetched)

    assert candidate.type is None
    assert candidate.stats.attack is None
    assert fetched.stats.hp == 35
