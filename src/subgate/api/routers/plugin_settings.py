"""Plugin settings and video form field endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from subgate.api.deps import get_plugin, get_settings_manager
from subgate.api.schemas import (
    SettingsResponse,
    SettingsUpdateRequest,
    VideoFieldsResponse,
)
from subgate.plugin.main import SubscriberGatePlugin
from subgate.services.settings_manager import DatabaseSettingsManager

router = APIRouter()


@router.get("/plugin/settings", response_model=SettingsResponse)
async def get_plugin_settings(
    settings_manager: DatabaseSettingsManager = Depends(get_settings_manager),
) -> SettingsResponse:
    """Get every plugin setting with its current value."""
    return SettingsResponse(settings=await settings_manager.get_all_settings())


@router.put("/plugin/settings", response_model=SettingsResponse)
async def update_plugin_settings(
    body: SettingsUpdateRequest,
    settings_manager: DatabaseSettingsManager = Depends(get_settings_manager),
    plugin: SubscriberGatePlugin = Depends(get_plugin),
) -> SettingsResponse:
    """
    Update plugin settings.

    The plugin is resolved first so its policy snapshot is subscribed before
    the change notification goes out.
    """
    updated = await settings_manager.update_settings(body.settings)
    return SettingsResponse(settings=updated)


@router.get("/plugin/video-fields", response_model=VideoFieldsResponse)
async def get_video_fields(
    plugin: SubscriberGatePlugin = Depends(get_plugin),
) -> VideoFieldsResponse:
    """Get the per-video form fields for the current settings."""
    return VideoFieldsResponse(fields=await plugin.video_fields())
