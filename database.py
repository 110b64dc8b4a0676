"""
Record store backends.

A record store is a durable key-value map of JSON-compatible values. Reads
never raise: missing or unreadable data falls back to the caller's default.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from config import Settings
from errors import PersistenceError

logger = logging.getLogger(__name__)

KEY_PREFIX = "yd-mock-"


class RecordStore:
    def get(self, key: str, default: Any) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryRecordStore(RecordStore):
    """Keeps serialized values in a dict; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str, default: Any) -> Any:
        raw = self.data.get(KEY_PREFIX + key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.error("Corrupt value for key %r, using default", key)
            return default

    def set(self, key: str, value: Any) -> None:
        try:
            self.data[KEY_PREFIX + key] = json.dumps(value)
        except (TypeError, ValueError):
            logger.exception("Could not serialize key %r", key)


class JsonFileRecordStore(RecordStore):
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{KEY_PREFIX}{key}.json"

    def get(self, key: str, default: Any) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError):
            logger.exception("Error reading key %r from %s", key, path)
            return default

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        tmp = None
        try:
            payload = json.dumps(value, indent=2)
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=path.name, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError):
            logger.exception("Error writing key %r to %s", key, path)
        finally:
            # Only left behind when the replace did not happen
            if tmp is not None:
                Path(tmp).unlink(missing_ok=True)


class MongoRecordStore(RecordStore):
    """Stores each key as ``{_id: <prefixed key>, value: ...}`` in one collection."""

    def __init__(self, db, collection: str = "kv"):
        self.collection = db[collection]

    def get(self, key: str, default: Any) -> Any:
        try:
            doc = self.collection.find_one({"_id": KEY_PREFIX + key})
        except PyMongoError:
            logger.exception("Error reading key %r from MongoDB", key)
            return default
        if not doc or "value" not in doc:
            return default
        return doc["value"]

    def set(self, key: str, value: Any) -> None:
        try:
            self.collection.replace_one({"_id": KEY_PREFIX + key}, {"value": value}, upsert=True)
        except PyMongoError as e:
            raise PersistenceError(f"Could not save {key}: {e}") from e


def create_record_store(settings: Settings) -> RecordStore:
    if settings.database_url:
        client = MongoClient(settings.database_url)
        logger.info("Using MongoDB record store %r", settings.database_name)
        return MongoRecordStore(client[settings.database_name])
    logger.info("Using JSON record store in %s", settings.data_dir)
    return JsonFileRecordStore(settings.data_dir)
