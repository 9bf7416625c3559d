"""
JSON-file storage for the tracker collections.

Each logical collection (exercises, workouts, templates, targets) lives in
its own JSON document inside the data directory. Writes go to a temporary
file in the same directory which then replaces the target, so a crash never
leaves a half-written collection behind.
"""

import json
import logging
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from ..core.engine.config_loader import get_user_config_dir
from ..core.models import TrackerState
from .serializers import (
    COLLECTION_KEYS,
    ENTITY_READERS,
    ENTITY_WRITERS,
    ValidationError,
    dict_to_state,
    state_to_dict,
)

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1


def get_default_data_dir() -> Path:
    """Data files share the directory with the user's stats.yaml."""
    return get_user_config_dir()


def _write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(payload, indent=2) + "\n"
    tmp = NamedTemporaryFile("w", dir=path.parent, delete=False, encoding="utf-8")
    temp_path = Path(tmp.name)
    try:
        with tmp:
            tmp.write(text)
        temp_path.replace(path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def _read_json(path: Path) -> Any:
    raw = path.read_text(encoding="utf-8").strip()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Could not parse {path}: {e}") from e


class TrackerStore:
    """
    Manages the four collections stored as JSON files in one directory.

    Layout:
        <data_dir>/exercises.json
        <data_dir>/workouts.json
        <data_dir>/templates.json
        <data_dir>/targets.json

    A missing file is an empty collection.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the collection files
        """
        self.data_dir = Path(data_dir)

    def collection_path(self, key: str) -> Path:
        if key not in COLLECTION_KEYS:
            raise KeyError(f"Unknown collection: {key}")
        return self.data_dir / f"{key}.json"

    def exists(self) -> bool:
        """True once the store has been initialized."""
        return self.collection_path("exercises").exists()

    def init(self, state: TrackerState | None = None) -> None:
        """
        Create the data directory and write every collection.

        Existing files are left untouched.

        Args:
            state: Initial contents (defaults to empty collections)
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        state = state or TrackerState()
        for key in COLLECTION_KEYS:
            if not self.collection_path(key).exists():
                self.save_collection(key, getattr(state, key))

    def load_collection(self, key: str) -> list:
        """
        Load one collection.

        Args:
            key: "exercises", "workouts", "templates", or "targets"

        Returns:
            List of model instances

        Raises:
            ValidationError: If the file is not a valid collection
        """
        path = self.collection_path(key)
        if not path.exists():
            return []

        data = _read_json(path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValidationError(f"{path} must contain a JSON list")

        items = []
        reader = ENTITY_READERS[key]
        for index, item in enumerate(data):
            try:
                items.append(reader(item))
            except (ValidationError, AttributeError, TypeError) as e:
                raise ValidationError(f"Error parsing entry {index} in {path}: {e}") from e

        logger.debug("Loaded %d %s from %s", len(items), key, path)
        return items

    def save_collection(self, key: str, items: list) -> None:
        """Replace one collection on disk."""
        path = self.collection_path(key)
        writer = ENTITY_WRITERS[key]
        _write_json_atomic(path, [writer(item) for item in items])
        logger.debug("Saved %d %s to %s", len(items), key, path)

    def load_state(self) -> TrackerState:
        """
        Load all four collections.

        Raises:
            FileNotFoundError: If the store has not been initialized
            ValidationError: If any collection is invalid
        """
        if not self.exists():
            raise FileNotFoundError(
                f"No data found in {self.data_dir}. Run 'init' first."
            )
        return TrackerState(**{key: self.load_collection(key) for key in COLLECTION_KEYS})

    def save_state(self, state: TrackerState, keys: tuple[str, ...] = COLLECTION_KEYS) -> None:
        """
        Persist collections of a state.

        Args:
            state: State to write
            keys: Which collections changed (default: all)
        """
        for key in keys:
            self.save_collection(key, getattr(state, key))

    def export_state(self, path: str | Path) -> Path:
        """
        Write every collection into one portable JSON document.

        Returns:
            The written path
        """
        target = Path(path)
        payload = {"version": EXPORT_VERSION, **state_to_dict(self.load_state())}
        _write_json_atomic(target, payload)
        logger.info("Exported data to %s", target)
        return target


def read_export(path: str | Path) -> TrackerState:
    """
    Parse an export document for merging.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the document is invalid
    """
    source = Path(path)
    data = _read_json(source)
    if data is None:
        raise ValidationError(f"{source} is empty")
    try:
        return dict_to_state(data)
    except (AttributeError, TypeError) as e:
        raise ValidationError(f"Invalid export {source}: {e}") from e
