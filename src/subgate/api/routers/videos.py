"""Video endpoints, each routed through the hook the host would run."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from subgate.api.deps import get_db, get_identity, get_plugin
from subgate.api.schemas import (
    ErrorCode,
    VideoUpdateRequest,
    VideoUpdateResponse,
    problem_response,
)
from subgate.exceptions import NotFoundError
from subgate.models.video import VideoListResult
from subgate.plugin.hooks import (
    VIDEO_DOWNLOAD_ALLOWED,
    VIDEO_GET,
    VIDEO_UPDATED,
    VIDEOS_LIST,
)
from subgate.plugin.main import SubscriberGatePlugin
from subgate.repositories.video_repository import VideoRepository, to_video_record

logger = logging.getLogger(__name__)

router = APIRouter()

video_repository = VideoRepository()

HOST_DOWNLOAD_DISABLED_MESSAGE = "Downloads are not enabled for this video."


async def _get_video_or_404(session: AsyncSession, uuid: str) -> Dict[str, Any]:
    video = await video_repository.get_by_uuid(session, uuid)
    if video is None:
        raise NotFoundError("Video", uuid)
    return to_video_record(video, include_media=True).to_response()


@router.get("/videos")
async def list_videos(
    limit: int = Query(default=25, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_db),
    identity: Optional[int] = Depends(get_identity),
    plugin: SubscriberGatePlugin = Depends(get_plugin),
) -> Dict[str, Any]:
    """List videos, with subscriber-only videos the requester may not see removed."""
    rows, total = await video_repository.list_page(session, limit=limit, offset=offset)
    page = VideoListResult(data=[to_video_record(row) for row in rows], total=total)

    return await plugin.registry.run_filter(
        VIDEOS_LIST, page.to_response(), {"userId": identity}
    )


@router.get("/videos/{uuid}")
async def get_video(
    response: Response,
    uuid: str = Path(..., min_length=1),
    session: AsyncSession = Depends(get_db),
    identity: Optional[int] = Depends(get_identity),
    plugin: SubscriberGatePlugin = Depends(get_plugin),
) -> Dict[str, Any]:
    """
    Fetch a video.

    A restricted video is answered with status 403 and a redacted body that
    references no media.
    """
    video = await _get_video_or_404(session, uuid)
    return await plugin.registry.run_filter(
        VIDEO_GET, video, {"userId": identity, "response": response}
    )


@router.get("/videos/{uuid}/download", response_model=None)
async def download_video(
    uuid: str = Path(..., min_length=1),
    session: AsyncSession = Depends(get_db),
    identity: Optional[int] = Depends(get_identity),
    plugin: SubscriberGatePlugin = Depends(get_plugin),
) -> Any:
    """Return the downloadable files of a video, or a 403 problem response."""
    video = await _get_video_or_404(session, uuid)

    if video.get("downloadEnabled", True):
        host_result: Dict[str, Any] = {"allowed": True}
    else:
        host_result = {"allowed": False, "errorMessage": HOST_DOWNLOAD_DISABLED_MESSAGE}

    result = await plugin.registry.run_filter(
        VIDEO_DOWNLOAD_ALLOWED,
        host_result,
        {"user": {"id": identity} if identity is not None else None, "video": video},
    )

    if not result.get("allowed"):
        return problem_response(
            ErrorCode.FORBIDDEN,
            403,
            result.get("errorMessage") or HOST_DOWNLOAD_DISABLED_MESSAGE,
            f"/api/v1/videos/{uuid}/download",
        )

    return {
        "uuid": uuid,
        "files": video.get("files", []),
        "streamingPlaylists": video.get("streamingPlaylists", []),
    }


@router.put("/videos/{uuid}", response_model=VideoUpdateResponse)
async def update_video(
    body: VideoUpdateRequest,
    uuid: str = Path(..., min_length=1),
    session: AsyncSession = Depends(get_db),
    plugin: SubscriberGatePlugin = Depends(get_plugin),
) -> VideoUpdateResponse:
    """
    Update a video's plugin data.

    The flags are persisted by the update action; the response reports what
    is stored afterwards.
    """
    video = await _get_video_or_404(session, uuid)
    await plugin.registry.run_action(
        VIDEO_UPDATED,
        {"video": video, "body": body.model_dump(by_alias=True, exclude_none=True)},
    )

    stored = await plugin.flag_store.get(uuid)
    return VideoUpdateResponse(
        uuid=uuid, flags=stored.to_storage() if stored is not None else None
    )
