from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

from photomedia.domain.entities.thumbnail import GeneratedImage, ThumbnailArtifact, ThumbnailSpec
from photomedia.domain.enums.resample import ImageFormat


class ResamplerPort(Protocol):
    def generate(self, spec: ThumbnailSpec, source_path: Path) -> GeneratedImage: ...


class ThumbnailStorePort(Protocol):
    def get(self, key: str) -> Optional[ThumbnailArtifact]: ...

    def put(
        self,
        key: str,
        data: bytes,
        *,
        source_hash: str,
        width: int,
        height: int,
        format: ImageFormat,
    ) -> ThumbnailArtifact: ...           # raises WriteFailed

    def invalidate(self, key: str) -> None: ...
