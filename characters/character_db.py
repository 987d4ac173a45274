"""Defines the Character database interface and data structures."""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field

# Equipment entries are plain names or item objects ({"name", "description", "cost"})
EquipmentType = Union[str, Dict[str, Any]]

# Proficiency state per name: 0 = none, 1 = proficient, 2 = half, 3 = expertise
ProficiencyMap = Dict[str, int]

DEFAULT_ALIGNMENT = "Neutral"

ABILITY_NAMES = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)

# Copper value of each coin
COIN_VALUES = {"platinum": 1000, "gold": 100, "silver": 10, "copper": 1}


class StorageError(Exception):
    """Raised when a character record cannot be listed, read, written or removed.

    Attributes:
        path: The file or directory the failed operation touched, if any.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


@dataclass
class AbilityScores:
    """The six ability scores of a character."""

    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10

    def modifier(self, ability: str) -> int:
        """Returns the ability modifier, floor((score - 10) / 2)."""
        if ability not in ABILITY_NAMES:
            raise ValueError(f"Unknown ability: {ability}")
        return math.floor((getattr(self, ability) - 10) / 2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AbilityScores":
        if not isinstance(data, dict):
            raise TypeError("'ability_scores' field must be a dictionary.")
        return cls(**{name: data.get(name, 10) for name in ABILITY_NAMES})

    def to_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in ABILITY_NAMES}


@dataclass
class Currency:
    """Coin purse. Missing denominations count as zero."""

    platinum: int = 0
    gold: int = 0
    silver: int = 0
    copper: int = 0

    def total_in_copper(self) -> int:
        return sum(getattr(self, coin) * value for coin, value in COIN_VALUES.items())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Currency":
        if not isinstance(data, dict):
            raise TypeError("'currency' field must be a dictionary.")
        return cls(**{coin: data.get(coin, 0) for coin in COIN_VALUES})

    def to_dict(self) -> Dict[str, int]:
        return {coin: getattr(self, coin) for coin in COIN_VALUES}


@dataclass
class Character:
    """Data structure representing one character sheet.

    Field names mirror the keys of the serialized record, except ``class_name``
    which is stored under ``"class"``.
    """

    id: str  # Unique identifier, also the record's file name
    name: str = ""
    race: str = ""
    subrace: Optional[str] = None
    class_name: str = ""
    background: str = ""
    alignment: str = DEFAULT_ALIGNMENT
    level: int = 1
    ability_scores: AbilityScores = field(default_factory=AbilityScores)
    hit_points: int = 0
    max_hit_points: Optional[int] = None
    armor_class: int = 10
    initiative: int = 0
    equipment: List[EquipmentType] = field(default_factory=list)
    spells: List[str] = field(default_factory=list)
    spell_slots: List[int] = field(default_factory=list)  # Slot count per spell level
    notes: str = ""
    saving_throw_proficiencies: ProficiencyMap = field(default_factory=dict)
    skill_proficiencies: ProficiencyMap = field(default_factory=dict)
    armor_proficiencies: List[str] = field(default_factory=list)
    weapon_proficiencies: List[str] = field(default_factory=list)
    tool_proficiencies: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    heroic_inspiration: bool = False
    used_abilities: List[str] = field(default_factory=list)
    currency: Optional[Currency] = None

    # Keys written by the editor that this model does not name (subclass, speed,
    # death saves, ...). Carried through untouched so a save never drops them.
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate required fields after initialization."""
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("Character id cannot be empty.")

    @property
    def proficiency_bonus(self) -> int:
        """Proficiency bonus for the character's level, floor((level - 1) / 4) + 2."""
        return math.floor((self.level - 1) / 4) + 2

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], default_id: Optional[str] = None
    ) -> "Character":
        """Builds a Character from its serialized dictionary form.

        Absent fields take their defaults so older records still load.

        Args:
            data: The decoded record.
            default_id: Identifier to use when the record has no "id" key
                        (the file name stem when loading from disk).

        Raises:
            TypeError: If the record or one of its sub-records is not a dictionary.
            ValueError: If no identifier can be determined.
        """
        if not isinstance(data, dict):
            raise TypeError("Character record must be a JSON object.")

        currency = data.get("currency")
        extra_fields = {k: v for k, v in data.items() if k not in _RECORD_KEYS}

        return cls(
            id=data.get("id", default_id),
            name=data.get("name", ""),
            race=data.get("race", ""),
            subrace=data.get("subrace"),
            class_name=data.get("class", ""),
            background=data.get("background", ""),
            alignment=data.get("alignment", DEFAULT_ALIGNMENT),
            level=data.get("level", 1),
            ability_scores=AbilityScores.from_dict(data.get("ability_scores", {})),
            hit_points=data.get("hit_points", 0),
            max_hit_points=data.get("max_hit_points"),
            armor_class=data.get("armor_class", 10),
            initiative=data.get("initiative", 0),
            equipment=_list_field(data, "equipment"),
            spells=_list_field(data, "spells"),
            spell_slots=_list_field(data, "spell_slots"),
            notes=data.get("notes", ""),
            saving_throw_proficiencies=_dict_field(data, "saving_throw_proficiencies"),
            skill_proficiencies=_dict_field(data, "skill_proficiencies"),
            armor_proficiencies=_list_field(data, "armor_proficiencies"),
            weapon_proficiencies=_list_field(data, "weapon_proficiencies"),
            tool_proficiencies=_list_field(data, "tool_proficiencies"),
            languages=_list_field(data, "languages"),
            heroic_inspiration=data.get("heroic_inspiration", False),
            used_abilities=_list_field(data, "used_abilities"),
            currency=Currency.from_dict(currency) if currency is not None else None,
            extra_fields=extra_fields,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Returns the serialized dictionary form. Unset optional fields are omitted."""
        data: Dict[str, Any] = dict(self.extra_fields)
        data.update(
            {
                "id": self.id,
                "name": self.name,
                "race": self.race,
                "class": self.class_name,
                "background": self.background,
                "alignment": self.alignment,
                "level": self.level,
                "ability_scores": self.ability_scores.to_dict(),
                "hit_points": self.hit_points,
                "armor_class": self.armor_class,
                "initiative": self.initiative,
                "equipment": list(self.equipment),
                "spells": list(self.spells),
                "spell_slots": list(self.spell_slots),
                "notes": self.notes,
                "saving_throw_proficiencies": dict(self.saving_throw_proficiencies),
                "skill_proficiencies": dict(self.skill_proficiencies),
                "armor_proficiencies": list(self.armor_proficiencies),
                "weapon_proficiencies": list(self.weapon_proficiencies),
                "tool_proficiencies": list(self.tool_proficiencies),
                "languages": list(self.languages),
                "heroic_inspiration": self.heroic_inspiration,
                "used_abilities": list(self.used_abilities),
            }
        )
        if self.subrace is not None:
            data["subrace"] = self.subrace
        if self.max_hit_points is not None:
            data["max_hit_points"] = self.max_hit_points
        if self.currency is not None:
            data["currency"] = self.currency.to_dict()
        return data


def _list_field(data: Dict[str, Any], key: str) -> List[Any]:
    """Returns a copy of a list field, empty when absent."""
    value = data.get(key, [])
    if not isinstance(value, list):
        raise TypeError(f"'{key}' field must be a list.")
    return list(value)


def _dict_field(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Returns a copy of a mapping field, empty when absent."""
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise TypeError(f"'{key}' field must be a dictionary.")
    return dict(value)


_RECORD_KEYS = frozenset(
    [
        "id",
        "name",
        "race",
        "subrace",
        "class",
        "background",
        "alignment",
        "level",
        "ability_scores",
        "hit_points",
        "max_hit_points",
        "armor_class",
        "initiative",
        "equipment",
        "spells",
        "spell_slots",
        "notes",
        "saving_throw_proficiencies",
        "skill_proficiencies",
        "armor_proficiencies",
        "weapon_proficiencies",
        "tool_proficiencies",
        "languages",
        "heroic_inspiration",
        "used_abilities",
        "currency",
    ]
)


class CharacterDatabase(ABC):
    """Abstract base class defining the interface for a character store.

    Responsibilities:
    - Listing, saving and deleting Character records.
    - Reporting where the records live.

    Implementations hold no cache: every call goes back to the backing storage.
    All failures are reported as StorageError.
    """

    @abstractmethod
    def list_characters(self) -> List[Character]:
        """Returns every stored character.

        Returns:
            All characters, or an empty list if nothing has been stored yet.

        Raises:
            StorageError: If the storage cannot be read or any record is invalid.
        """
        pass

    @abstractmethod
    def save_character(self, character: Character) -> None:
        """Stores a character, replacing any record with the same id.

        Raises:
            StorageError: If the record cannot be serialized or written.
        """
        pass

    @abstractmethod
    def delete_character(self, character_id: str) -> None:
        """Removes the character with the given id. Unknown ids are not an error.

        Raises:
            StorageError: If an existing record cannot be removed.
        """
        pass

    @abstractmethod
    def get_storage_directory(self) -> str:
        """Returns the absolute path where records are kept."""
        pass

    @abstractmethod
    def get_character_by_id(self, character_id: str) -> Optional[Character]:
        """Retrieves a character directly by their unique ID.

        Args:
            character_id: The unique identifier of the character.

        Returns:
            The Character object, or None if the ID is not found.
        """
        pass

    @abstractmethod
    def get_character_by_name(self, name: str) -> Optional[Character]:
        """Finds a character using a potentially fuzzy name lookup.

        Args:
            name: The name (or partial name) to search for.

        Returns:
            The matching Character object, or None if no suitable match is found.
        """
        pass
