# photomedia/services/api/routers/health.py
from __future__ import annotations
from fastapi import APIRouter, Depends
from photomedia.common.settings import Settings
from photomedia.services.api.deps import get_app_settings, get_thumb_runtime
from photomedia.services.thumbs.runtime import ThumbRuntime

router = APIRouter()

@router.get("/healthz")
def healthz(
    cfg: Settings = Depends(get_app_settings),
    rt: ThumbRuntime = Depends(get_thumb_runtime),
):
    return {
        "ok": cfg.originals_root.is_dir() and rt.store.root.is_dir(),
        "app": cfg.app_name,
        "env": cfg.app_env,
        "thumbs_in_flight": rt.coordinator.stats()["in_flight"],
    }
