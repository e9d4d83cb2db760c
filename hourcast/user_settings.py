"""User preferences persisted as plain strings in the key-value store.

Keys match what the web client has always written: "darkMode",
"allowUnsuitableTasks", "defaultLocation" and "defaultLocationData" (JSON with
name/latitude/longitude). Booleans are stored as "true"/"false".
"""

from __future__ import annotations

import json

from pydantic import BaseModel

from hourcast.config import settings as app_settings
from hourcast.domain import Location
from hourcast.errors import InvalidLocation
from hourcast.kv_store import KeyValueStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="user_settings")

DARK_MODE_KEY = "darkMode"
ALLOW_UNSUITABLE_KEY = "allowUnsuitableTasks"
DEFAULT_LOCATION_KEY = "defaultLocation"
DEFAULT_LOCATION_DATA_KEY = "defaultLocationData"


class UserSettings(BaseModel):
    """Settings page state."""
    dark_mode: bool = False
    allow_unsuitable_tasks: bool = False
    default_location_name: str = ""
    default_location: Location | None = None


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    return raw == "true"


def _encode_flag(value: bool) -> str:
    return "true" if value else "false"


def read_allow_unsuitable(store: KeyValueStore, *, default: bool | None = None) -> bool:
    """Current value of the unsuitable-task override, read fresh on every call."""
    fallback = app_settings.allow_unsuitable_tasks_default if default is None else default
    return _flag(store.get(ALLOW_UNSUITABLE_KEY), fallback)


def write_allow_unsuitable(store: KeyValueStore, allowed: bool) -> None:
    store.set(ALLOW_UNSUITABLE_KEY, _encode_flag(allowed))


def _load_location(raw: str | None) -> Location | None:
    """Decode the stored default location; anything unreadable means "none"."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring unreadable default location", extra={"error": str(exc)})
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring default location that is not an object")
        return None
    try:
        return Location.parse(data.get("name"), data.get("latitude"), data.get("longitude"))
    except InvalidLocation as exc:
        logger.warning("Ignoring invalid default location", extra={"error": str(exc)})
        return None


def load_user_settings(store: KeyValueStore) -> UserSettings:
    """Read every settings key, falling back to defaults for missing values."""
    return UserSettings(
        dark_mode=_flag(store.get(DARK_MODE_KEY), False),
        allow_unsuitable_tasks=read_allow_unsuitable(store),
        default_location_name=store.get(DEFAULT_LOCATION_KEY) or "",
        default_location=_load_location(store.get(DEFAULT_LOCATION_DATA_KEY)),
    )


def save_user_settings(store: KeyValueStore, user_settings: UserSettings) -> None:
    """Write every settings key back; a missing default location clears its data key."""
    store.set(DARK_MODE_KEY, _encode_flag(user_settings.dark_mode))
    write_allow_unsuitable(store, user_settings.allow_unsuitable_tasks)
    store.set(DEFAULT_LOCATION_KEY, user_settings.default_location_name)
    if user_settings.default_location is not None:
        store.set(DEFAULT_LOCATION_DATA_KEY, user_settings.default_location.model_dump_json())
    else:
        store.remove(DEFAULT_LOCATION_DATA_KEY)
