"""File-backed implementation of the CharacterDatabase interface.

Each character lives in its own ``<id>.json`` file inside a single directory.
Nothing is cached between calls.
"""

import os
import json
import logging
from typing import List, Optional, Dict, Set

# Import configuration settings
import config

# Import the interface and data structures
from .character_db import CharacterDatabase, Character, StorageError

from thefuzz import process


class FileCharacterDB(CharacterDatabase):
    """Stores one JSON file per character in a directory."""

    def __init__(self, directory_path: Optional[str] = None):
        """Binds the store to a record directory.

        The directory is not created until the first save.

        Args:
            directory_path: Where the record files live. Defaults to the
                            per-user location from config.get_characters_dir().

        Raises:
            RuntimeError: If no directory is given and the per-user data
                          root cannot be determined.
        """
        if directory_path is None:
            directory_path = config.get_characters_dir()
        self._directory = os.path.abspath(directory_path)
        logging.info("Initialized FileCharacterDB at: %s", self._directory)

    # --- Helper Methods ---

    def _path_for(self, character_id: str) -> str:
        """Returns the record file path for an id, rejecting ids that are not a plain name."""
        if (
            not isinstance(character_id, str)
            or not character_id
            or character_id in (".", "..")
            or "/" in character_id
            or "\\" in character_id
            or os.sep in character_id
            or "\x00" in character_id
        ):
            raise StorageError(f"Invalid character id: {character_id!r}")
        return os.path.join(self._directory, character_id + config.RECORD_EXTENSION)

    def _read_character_file(self, filepath: str) -> Character:
        """Reads and parses one record file."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            logging.error("Failed to read file %s: %s", filepath, e)
            raise StorageError(f"Failed to read file {filepath}: {e}", filepath) from e

        # Records written before ids were stored take the file name
        stem = os.path.basename(filepath)[: -len(config.RECORD_EXTENSION)]
        try:
            data = json.loads(content)
            character = Character.from_dict(data, default_id=stem)
            # The file name is the id; a record claiming another id would shadow it
            if character.id != stem:
                raise ValueError(
                    f"Record id '{character.id}' does not match file name '{stem}'"
                )
            return character
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logging.error("Failed to parse character %s: %s", filepath, e)
            raise StorageError(
                f"Failed to parse character {filepath}: {e}", filepath
            ) from e

    # --- Store Operations ---

    def list_characters(self) -> List[Character]:
        """Loads every record in the directory, in directory enumeration order.

        A single unreadable or malformed file fails the whole listing so that a
        damaged record is never silently hidden (and later overwritten).
        """
        if not os.path.exists(self._directory):
            logging.info("Character directory does not exist yet: %s", self._directory)
            return []

        try:
            filenames = os.listdir(self._directory)
        except OSError as e:
            logging.error("Failed to read directory %s: %s", self._directory, e)
            raise StorageError(
                f"Failed to read directory {self._directory}: {e}", self._directory
            ) from e

        characters = []
        for filename in filenames:
            if not filename.endswith(config.RECORD_EXTENSION):
                continue
            filepath = os.path.join(self._directory, filename)
            if not os.path.isfile(filepath):
                continue
            characters.append(self._read_character_file(filepath))

        logging.info(
            "Loaded %d characters from %s", len(characters), self._directory
        )
        return characters

    def save_character(self, character: Character) -> None:
        """Writes the full record to ``<id>.json``, replacing any previous content."""
        filepath = self._path_for(character.id)

        try:
            os.makedirs(self._directory, exist_ok=True)
        except OSError as e:
            logging.error("Failed to create directory %s: %s", self._directory, e)
            raise StorageError(
                f"Failed to create directory {self._directory}: {e}", self._directory
            ) from e

        try:
            content = json.dumps(
                character.to_dict(), indent=config.JSON_INDENT, ensure_ascii=False
            )
        except (TypeError, ValueError) as e:
            logging.error("Failed to serialize character %s: %s", character.id, e)
            raise StorageError(
                f"Failed to serialize character {character.id}: {e}", filepath
            ) from e

        try:
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            logging.error("Failed to write file %s: %s", filepath, e)
            raise StorageError(f"Failed to write file {filepath}: {e}", filepath) from e

        logging.info("Saved character '%s' to %s", character.id, filepath)

    def delete_character(self, character_id: str) -> None:
        """Removes ``<id>.json`` if it exists."""
        filepath = self._path_for(character_id)
        if not os.path.exists(filepath):
            logging.info("No record to delete for '%s'", character_id)
            return

        try:
            os.remove(filepath)
        except FileNotFoundError:
            # Removed by someone else in the meantime; the outcome is the same
            return
        except OSError as e:
            logging.error("Failed to delete file %s: %s", filepath, e)
            raise StorageError(f"Failed to delete file {filepath}: {e}", filepath) from e

        logging.info("Deleted character '%s'", character_id)

    def get_storage_directory(self) -> str:
        return self._directory

    # --- Lookups ---

    def get_character_by_id(self, character_id: str) -> Optional[Character]:
        """Reads a single record by id."""
        filepath = self._path_for(character_id)
        if not os.path.isfile(filepath):
            return None
        return self._read_character_file(filepath)

    def get_character_by_name(self, name: str) -> Optional[Character]:
        """Looks up a character by name using fuzzy matching (builds map on the fly)."""
        characters = self.list_characters()
        if not characters:
            return None

        # --- Build name map on the fly ---
        name_to_id_map: Dict[str, str] = {}
        ambiguous_names: Set[str] = set()
        by_id: Dict[str, Character] = {}
        for char in characters:
            by_id[char.id] = char
            if not char.name:
                continue
            lower_name = char.name.lower()
            if lower_name in name_to_id_map and name_to_id_map[lower_name] != char.id:
                ambiguous_names.add(lower_name)
            name_to_id_map[lower_name] = char.id
        # --- End build name map ---

        lookup_name = name.lower()

        # Check for exact match first (respecting ambiguity)
        if lookup_name in name_to_id_map and lookup_name not in ambiguous_names:
            return by_id[name_to_id_map[lookup_name]]

        all_known_names = list(name_to_id_map.keys())
        if not all_known_names:
            return None

        best_match, score = process.extractOne(lookup_name, all_known_names)

        if score >= config.NAME_MATCH_THRESHOLD:
            if best_match in ambiguous_names:
                logging.warning(
                    "Fuzzy match '%s' for '%s' is ambiguous. Returning one possibility.",
                    best_match,
                    name,
                )
            return by_id[name_to_id_map[best_match]]

        return None  # No good match found
