"""Unit tests for the Character data structures and their record format."""

import pytest
from typing import Dict

from characters.character_db import (
    AbilityScores,
    Character,
    Currency,
    DEFAULT_ALIGNMENT,
)


@pytest.fixture
def minimal_record() -> Dict:
    """A record as written by an early version of the editor."""
    return {
        "id": "abc",
        "name": "Fenn",
        "race": "Halfling",
        "class": "Rogue",
        "background": "Urchin",
        "level": 3,
        "ability_scores": {
            "strength": 10,
            "dexterity": 14,
            "constitution": 12,
            "intelligence": 8,
            "wisdom": 13,
            "charisma": 15,
        },
        "hit_points": 22,
        "armor_class": 15,
        "initiative": 2,
        "equipment": ["Shortsword", "Thieves' tools"],
        "spells": [],
        "spell_slots": [],
        "notes": "",
    }


# --- Default Filling ---


def test_missing_alignment_defaults_to_neutral(minimal_record):
    character = Character.from_dict(minimal_record)
    assert character.alignment == DEFAULT_ALIGNMENT == "Neutral"


def test_missing_currency_is_absent(minimal_record):
    character = Character.from_dict(minimal_record)
    assert character.currency is None


def test_partial_currency_fills_zeroes(minimal_record):
    minimal_record["currency"] = {"gold": 12}
    character = Character.from_dict(minimal_record)
    assert character.currency == Currency(platinum=0, gold=12, silver=0, copper=0)


def test_missing_proficiencies_are_empty(minimal_record):
    character = Character.from_dict(minimal_record)
    assert character.saving_throw_proficiencies == {}
    assert character.skill_proficiencies == {}
    assert character.armor_proficiencies == []
    assert character.weapon_proficiencies == []
    assert character.tool_proficiencies == []
    assert character.languages == []
    assert character.heroic_inspiration is False
    assert character.used_abilities == []


def test_class_key_maps_to_class_name(minimal_record):
    character = Character.from_dict(minimal_record)
    assert character.class_name == "Rogue"
    assert character.to_dict()["class"] == "Rogue"


def test_missing_id_uses_default_id(minimal_record):
    del minimal_record["id"]
    character = Character.from_dict(minimal_record, default_id="from_file")
    assert character.id == "from_file"


def test_missing_id_without_default_is_rejected(minimal_record):
    del minimal_record["id"]
    with pytest.raises(ValueError, match="Character id cannot be empty"):
        Character.from_dict(minimal_record)


def test_non_object_record_is_rejected():
    with pytest.raises(TypeError, match="must be a JSON object"):
        Character.from_dict(["not", "a", "record"])


def test_bad_ability_scores_type_is_rejected(minimal_record):
    minimal_record["ability_scores"] = [10, 10, 10, 10, 10, 10]
    with pytest.raises(TypeError, match="'ability_scores' field must be a dictionary"):
        Character.from_dict(minimal_record)


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("languages", "Common", "'languages' field must be a list"),
        ("spells", "Fireball", "'spells' field must be a list"),
        ("equipment", None, "'equipment' field must be a list"),
        ("skill_proficiencies", ["stealth"], "'skill_proficiencies' field must be a dictionary"),
        ("saving_throw_proficiencies", "dex", "'saving_throw_proficiencies' field must be a dictionary"),
    ],
)
def test_wrong_typed_collections_are_rejected(minimal_record, key, value, message):
    minimal_record[key] = value
    with pytest.raises(TypeError, match=message):
        Character.from_dict(minimal_record)


def test_values_are_not_range_checked(minimal_record):
    """Out-of-range values load as-is."""
    minimal_record["ability_scores"]["strength"] = 99
    minimal_record["level"] = 0
    character = Character.from_dict(minimal_record)
    assert character.ability_scores.strength == 99
    assert character.level == 0


# --- Serialization ---


def test_unset_optionals_are_omitted():
    data = Character(id="abc", name="Fenn").to_dict()
    assert "subrace" not in data
    assert "max_hit_points" not in data
    assert "currency" not in data
    assert data["alignment"] == "Neutral"


def test_set_optionals_are_written():
    character = Character(
        id="abc",
        subrace="Lightfoot",
        max_hit_points=24,
        currency=Currency(gold=5),
    )
    data = character.to_dict()
    assert data["subrace"] == "Lightfoot"
    assert data["max_hit_points"] == 24
    assert data["currency"] == {"platinum": 0, "gold": 5, "silver": 0, "copper": 0}


def test_unknown_fields_survive_round_trip(minimal_record):
    minimal_record["subclass"] = "Thief"
    minimal_record["death_saves_success"] = [True, False, False]
    character = Character.from_dict(minimal_record)
    assert character.extra_fields == {
        "subclass": "Thief",
        "death_saves_success": [True, False, False],
    }
    data = character.to_dict()
    assert data["subclass"] == "Thief"
    assert data["death_saves_success"] == [True, False, False]


def test_item_objects_in_equipment_are_kept(minimal_record):
    minimal_record["equipment"] = ["Rope", {"name": "Potion", "cost": 50}]
    character = Character.from_dict(minimal_record)
    assert character.equipment[1] == {"name": "Potion", "cost": 50}


# --- Rules Helpers ---


@pytest.mark.parametrize(
    "score, expected", [(1, -5), (8, -1), (9, -1), (10, 0), (11, 0), (15, 2), (20, 5)]
)
def test_ability_modifier(score, expected):
    scores = AbilityScores(dexterity=score)
    assert scores.modifier("dexterity") == expected


def test_ability_modifier_unknown_ability():
    with pytest.raises(ValueError):
        AbilityScores().modifier("luck")


@pytest.mark.parametrize(
    "level, expected", [(1, 2), (4, 2), (5, 3), (9, 4), (13, 5), (17, 6), (20, 6)]
)
def test_proficiency_bonus(level, expected):
    assert Character(id="x", level=level).proficiency_bonus == expected


def test_currency_total_in_copper():
    assert Currency(platinum=1, gold=2, silver=3, copper=4).total_in_copper() == 1234
