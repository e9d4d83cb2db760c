"""Per-hour task lists with write-through persistence.

Mutations never edit a record in place. A successful call returns a new list
with the touched record replaced; a declined call returns the very same list
object it was given, so ``result is records`` means "unchanged".

Declined calls are silent:
- adding to an unsuitable hour while the override is off
- adding blank text
- deleting an index that does not exist
- any call naming an unknown slot
"""

from __future__ import annotations

import json
from typing import Callable, List

from hourcast.domain import HourRecord, Tier
from hourcast.errors import PersistenceReadError
from hourcast.kv_store import KeyValueStore
from hourcast.user_settings import read_allow_unsuitable
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="task_store")

TASK_KEY_PREFIX = "tasks-"


def task_key(slot_id: str) -> str:
    """Store key holding the JSON task list of a slot."""
    return f"{TASK_KEY_PREFIX}{slot_id}"


def _decode_tasks(raw: str) -> List[str]:
    """Decode a stored task list, raising PersistenceReadError on anything unexpected."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PersistenceReadError(f"stored tasks are not JSON: {exc}") from exc
    if not isinstance(data, list) or not all(isinstance(t, str) for t in data):
        raise PersistenceReadError("stored tasks are not a list of strings")
    return data


def load_tasks(store: KeyValueStore, slot_id: str) -> List[str]:
    """Persisted tasks for a slot; corrupt data reads as an empty list."""
    raw = store.get(task_key(slot_id))
    if raw is None:
        return []
    try:
        return _decode_tasks(raw)
    except PersistenceReadError as exc:
        logger.warning("Treating slot as taskless", extra={"slot_id": slot_id, "error": str(exc)})
        return []


def save_tasks(store: KeyValueStore, slot_id: str, tasks: List[str]) -> None:
    """Write the full task list for a slot; an empty list removes the key."""
    if tasks:
        store.set(task_key(slot_id), json.dumps(tasks))
    else:
        store.remove(task_key(slot_id))


def store_lookup(store: KeyValueStore) -> Callable[[str], List[str]]:
    """Adapt a store into the lookup callable the normalizer expects."""
    return lambda slot_id: load_tasks(store, slot_id)


def _index_of(records: List[HourRecord], slot_id: str) -> int | None:
    for i, r in enumerate(records):
        if r.slot_id == slot_id:
            return i
    return None


def _replace(records: List[HourRecord], index: int, record: HourRecord) -> List[HourRecord]:
    updated = list(records)
    updated[index] = record
    return updated


def add_task(
    records: List[HourRecord],
    slot_id: str,
    text: str,
    *,
    store: KeyValueStore,
    allow_unsuitable: bool | None = None,
) -> List[HourRecord]:
    """
    Append `text` (trimmed) to a slot's tasks and clear its draft.

    `allow_unsuitable` overrides the unsuitable-hour gate for this call; when
    None the flag is read from the store at call time.
    """
    idx = _index_of(records, slot_id)
    if idx is None:
        logger.debug("add_task declined: unknown slot", extra={"slot_id": slot_id})
        return records

    cleaned = (text or "").strip()
    if not cleaned:
        logger.debug("add_task declined: blank text", extra={"slot_id": slot_id})
        return records

    record = records[idx]
    if record.tier == Tier.UNSUITABLE:
        allowed = read_allow_unsuitable(store) if allow_unsuitable is None else allow_unsuitable
        if not allowed:
            logger.debug("add_task declined: unsuitable hour", extra={"slot_id": slot_id})
            return records

    tasks = [*record.tasks, cleaned]
    save_tasks(store, slot_id, tasks)
    return _replace(records, idx, record.model_copy(update={"tasks": tasks, "draft": ""}))


def delete_task(
    records: List[HourRecord],
    slot_id: str,
    index: int,
    *,
    store: KeyValueStore,
) -> List[HourRecord]:
    """Remove the task at `index` in a slot; out-of-range indexes are ignored."""
    idx = _index_of(records, slot_id)
    if idx is None:
        return records

    record = records[idx]
    if not 0 <= index < len(record.tasks):
        logger.debug("delete_task declined: index out of range", extra={"slot_id": slot_id, "index": index})
        return records

    tasks = [t for i, t in enumerate(record.tasks) if i != index]
    save_tasks(store, slot_id, tasks)
    return _replace(records, idx, record.model_copy(update={"tasks": tasks}))


def set_draft(records: List[HourRecord], slot_id: str, text: str) -> List[HourRecord]:
    """Record the in-progress input for a slot. Drafts are never persisted."""
    idx = _index_of(records, slot_id)
    if idx is None:
        return records
    return _replace(records, idx, records[idx].model_copy(update={"draft": text}))
