# photomedia/services/api/routers/thumbs.py
from __future__ import annotations

from http import HTTPStatus
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse, Response

from photomedia.common.logging import get_logger
from photomedia.common.settings import Settings
from photomedia.database.repos.file_index_repo import SqlAlchemyFileIndexRepo
from photomedia.domain.errors import ThumbError
from photomedia.services.api.deps import (
    get_app_settings,
    get_fallback,
    get_file_index,
    get_thumb_runtime,
    get_thumbnail_service,
)
from photomedia.services.schemas.thumbs import SweepRequest, SweepResponse, ThumbStats
from photomedia.services.thumbs.fallback import FallbackResolver
from photomedia.services.thumbs.runtime import ThumbRuntime
from photomedia.services.thumbs.service import ThumbnailService, check_token, fallback_reason

logger = get_logger()

router = APIRouter(prefix="/thumbs", tags=["thumbs"])

# artifacts are immutable per URL+content, so browsers may keep them
_CACHE_CONTROL = "private, max-age=2592000, immutable"


def placeholder_response(err: ThumbError, fallback: FallbackResolver, file_id: Optional[str]) -> Response:
    ph = fallback.resolve(fallback_reason(err), file_id)
    return Response(
        content=ph.data,
        status_code=int(err.http_status),
        media_type=ph.media_type,
        headers={"X-Error-Code": err.code, "Cache-Control": "no-store"},
    )


@router.get("/stats", response_model=ThumbStats)
def thumb_stats(rt: ThumbRuntime = Depends(get_thumb_runtime)) -> ThumbStats:
    st = rt.store.stats()
    co = rt.coordinator.stats()
    return ThumbStats(
        cached=st["count"],
        cached_bytes=st["bytes"],
        hits=co["hits"],
        generations=co["generations"],
        failures=co["failures"],
        in_flight=co["in_flight"],
    )


@router.post("/sweep", response_model=SweepResponse)
def sweep_cache(
    payload: Optional[SweepRequest] = None,
    rt: ThumbRuntime = Depends(get_thumb_runtime),
    index: SqlAlchemyFileIndexRepo = Depends(get_file_index),
    cfg: Settings = Depends(get_app_settings),
) -> SweepResponse:
    max_bytes = payload.max_bytes if payload and payload.max_bytes is not None else cfg.thumbs.cache_max_bytes
    rep = rt.store.sweep(index.is_current_hash, max_bytes=max_bytes)
    logger.info(
        "thumbs: sweep removed %d stale, evicted %d, freed %d bytes",
        rep.stale_removed, rep.evicted, rep.bytes_freed,
    )
    return SweepResponse.model_validate(rep.as_dict())


@router.get("/{file_uid}/{width}/{height}", status_code=HTTPStatus.OK)
def get_thumbnail(
    file_uid: str,
    width: int,
    height: int,
    flags: Optional[str] = Query(None, description="Comma separated, e.g. 'center,png'"),
    t: Optional[str] = Query(None, description="Preview token"),
    svc: ThumbnailService = Depends(get_thumbnail_service),
    fallback: FallbackResolver = Depends(get_fallback),
    cfg: Settings = Depends(get_app_settings),
) -> Response:
    try:
        check_token(cfg.thumbs.preview_token, t)
        art = svc.get_or_create_thumbnail(file_uid, width, height, flags)
    except ThumbError as e:
        logger.info("thumbs: %s for %s (%sx%s): %s", e.code, file_uid, width, height, e)
        return placeholder_response(e, fallback, file_uid)
    return FileResponse(art.path, media_type=art.media_type, headers={"Cache-Control": _CACHE_CONTROL})
