# photomedia/services/thumbs/runtime.py
from __future__ import annotations

from dataclasses import dataclass

from photomedia.common.settings import Settings
from photomedia.services.thumbs.coordinator import GenerationCoordinator
from photomedia.services.thumbs.resampler import ResamplingEngine
from photomedia.services.thumbs.store import FilesystemThumbnailStore


@dataclass
class ThumbRuntime:
    """Process-wide thumbnail components; built once per app."""
    store: FilesystemThumbnailStore
    engine: ResamplingEngine
    coordinator: GenerationCoordinator

    def shutdown(self) -> None:
        self.coordinator.shutdown(wait=True)


def build_thumb_runtime(cfg: Settings) -> ThumbRuntime:
    t = cfg.thumbs
    store = FilesystemThumbnailStore(cfg.cache_root)
    engine = ResamplingEngine(jpeg_quality=t.jpeg_quality, max_pixels=t.max_pixels)
    coordinator = GenerationCoordinator(
        store,
        engine,
        workers=t.workers,
        timeout_sec=t.generation_timeout_sec,
    )
    return ThumbRuntime(store=store, engine=engine, coordinator=coordinator)
