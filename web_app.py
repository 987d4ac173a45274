"""
This is the command surface for the character sheet editor.
It exposes the character store to the presentation layer as a local JSON API.
"""

import logging
from flask import Flask, request, jsonify

from characters.character_db import Character, StorageError
from characters.file_character_db import FileCharacterDB
import config

# --- Logging Configuration ---
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

app = Flask(__name__)

# --- Store Initialization ---
# Bound to the per-user directory; tests swap in a store under a temporary directory.
logging.info("Initializing character store from the per-user data directory...")
character_db = FileCharacterDB()


def init_store(directory_path=None):
    """Binds the module's store to a record directory and returns it."""
    global character_db
    character_db = FileCharacterDB(directory_path)
    return character_db


# --- Routes ---

@app.route("/characters", methods=["GET"])
def list_characters():
    """Returns every stored character."""
    characters = character_db.list_characters()
    logging.info(f"Listing {len(characters)} characters")
    return jsonify([c.to_dict() for c in characters])


@app.route("/characters/search", methods=["GET"])
def search_character():
    """Returns the character whose name best matches ?name=."""
    name = request.args.get("name")
    if not name:
        return jsonify({"error": "Missing name"}), 400

    character = character_db.get_character_by_name(name)
    if character is None:
        return jsonify({"error": f"No character matching '{name}'."}), 404
    return jsonify(character.to_dict())


@app.route("/characters/<character_id>", methods=["GET"])
def get_character(character_id):
    """Returns a single character by id."""
    character = character_db.get_character_by_id(character_id)
    if character is None:
        return jsonify({"error": f"Character '{character_id}' not found."}), 404
    return jsonify(character.to_dict())


@app.route("/characters", methods=["POST"])
def save_character():
    """Creates or wholesale replaces the character in the request body."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Missing character"}), 400

    # Accept both {"character": {...}} and a bare record
    data = data.get("character", data)
    try:
        character = Character.from_dict(data)
    except (TypeError, ValueError) as e:
        logging.warning(f"Rejected invalid character payload: {e}")
        return jsonify({"error": f"Invalid character: {e}"}), 400

    character_db.save_character(character)
    return jsonify({"ok": True, "id": character.id})


@app.route("/characters/<character_id>", methods=["DELETE"])
def delete_character(character_id):
    """Deletes a character. Unknown ids succeed."""
    character_db.delete_character(character_id)
    return jsonify({"ok": True})


@app.route("/storage_directory", methods=["GET"])
def get_storage_directory():
    """Returns the directory holding the record files, for display and export."""
    return jsonify({"path": character_db.get_storage_directory()})


@app.errorhandler(StorageError)
def storage_error(e):
    logging.error(f"Storage error: {e}")
    return jsonify({"error": str(e)}), 500


# Add error handler for 404
@app.errorhandler(404)
def page_not_found(e):
    return jsonify({"error": "Not found"}), 404


# Add error handler for 500
@app.errorhandler(500)
def internal_server_error(e):
    logging.exception("Internal Server Error")
    return jsonify({"error": "Internal server error"}), 500
