"""HTTP API for hourly forecast previews and per-hour tasks."""

import hmac
from functools import partial
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel

from .config import settings
from .data_sources import build_data_source
from .domain import ForecastPreview, Location, Tier
from .errors import FetchError, InvalidLocation, MalformedForecast
from .forecast_normalizer import filter_by_tier
from .forecast_service import build_preview
from .preview_registry import PreviewRegistry
from .store_manager import get_store
from .task_store import add_task, delete_task, set_draft
from .user_settings import UserSettings, load_user_settings, save_user_settings
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header when a key is configured."""
    if not settings.api_key:
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)
REGISTRY = PreviewRegistry(
    ttl_seconds=settings.preview_ttl_seconds,
    max_entries=settings.preview_max_entries,
)


class ForecastRequest(BaseModel):
    """Location to preview."""
    name: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class TaskRequest(BaseModel):
    """Free-text task or draft for one hour."""
    text: str = ""


class MutationResponse(BaseModel):
    """Preview after a task mutation; `changed` is False when the call was declined."""
    changed: bool
    preview: ForecastPreview


def _mutate(location_key: str, fn) -> MutationResponse:
    """Apply a record mutation to the registry or 404 for unknown locations."""
    result = REGISTRY.mutate(location_key, fn)
    if result is None:
        raise HTTPException(status_code=404, detail="No forecast loaded for this location")
    preview, changed = result
    return MutationResponse(changed=changed, preview=preview)


@router.post("/forecast", response_model=ForecastPreview)
def load_forecast(req: ForecastRequest):
    """Fetch and classify the hourly forecast for a location."""
    try:
        location = Location.parse(req.name, req.latitude, req.longitude)
    except InvalidLocation as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    key = location.key
    token = REGISTRY.begin_fetch(key)
    try:
        preview = build_preview(location, data_source=DATA_SOURCE, store=get_store())
    except InvalidLocation as exc:
        REGISTRY.discard(key, token)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    except (FetchError, MalformedForecast) as exc:
        logger.warning("Forecast unavailable", extra={"location_key": key, "error": str(exc)})
        REGISTRY.discard(key, token)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))

    if not REGISTRY.commit(key, token, preview):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Superseded by a newer forecast request")
    return preview


@router.get("/locations/{location_key}/forecast", response_model=ForecastPreview)
def get_forecast(location_key: str, tiers: Optional[List[Tier]] = Query(default=None)):
    """
    Return the last loaded preview for a location.

    `records` holds only the requested tiers (good and bad unless `tiers` is
    given); insights and the current hour still cover every hour.
    """
    preview = REGISTRY.get(location_key)
    if preview is None:
        raise HTTPException(status_code=404, detail="No forecast loaded for this location")
    return preview.model_copy(update={"records": filter_by_tier(preview.records, tiers)})


@router.post("/locations/{location_key}/slots/{slot_id}/tasks", response_model=MutationResponse)
def create_task(location_key: str, slot_id: str, req: TaskRequest):
    """Attach a task to an hour; unsuitable hours accept tasks only with the override on."""
    return _mutate(location_key, partial(_add, slot_id=slot_id, text=req.text))


@router.delete("/locations/{location_key}/slots/{slot_id}/tasks/{index}", response_model=MutationResponse)
def remove_task(location_key: str, slot_id: str, index: int):
    """Remove a task by position; unknown positions leave the list unchanged."""
    return _mutate(location_key, partial(_delete, slot_id=slot_id, index=index))


@router.put("/locations/{location_key}/slots/{slot_id}/draft", response_model=MutationResponse)
def update_draft(location_key: str, slot_id: str, req: TaskRequest):
    """Keep the in-progress task text for an hour (not persisted)."""
    return _mutate(location_key, partial(set_draft, slot_id=slot_id, text=req.text))


@router.get("/settings", response_model=UserSettings)
def get_settings():
    """Return stored user settings."""
    return load_user_settings(get_store())


@router.put("/settings", response_model=UserSettings)
def put_settings(user_settings: UserSettings):
    """Replace stored user settings."""
    save_user_settings(get_store(), user_settings)
    return user_settings


def _add(records, *, slot_id: str, text: str):
    return add_task(records, slot_id, text, store=get_store())


def _delete(records, *, slot_id: str, index: int):
    return delete_task(records, slot_id, index, store=get_store())
