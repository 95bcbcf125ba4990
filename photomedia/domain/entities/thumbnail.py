# photomedia/domain/entities/thumbnail.py
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict

from photomedia.domain.enums.resample import ImageFormat, ResampleFilter, ResampleMethod
from photomedia.domain.errors import DimensionsInvalid


@dataclass(frozen=True)
class FileDescriptor:
    """
    Identity of a decodable source image as known to the file index:

        <root>/<rel_path>   with content hash <content_hash>

    Owned by the index; the thumbnail engine only reads it.
    """
    root: str
    rel_path: str
    content_hash: str

    def __post_init__(self):
        if not self.content_hash or not self.content_hash.strip():
            raise ValueError("FileDescriptor.content_hash is required")


@dataclass(frozen=True)
class ResampleOptionSet:
    method: ResampleMethod = ResampleMethod.fit
    filter: ResampleFilter = ResampleFilter.default
    format: ImageFormat = ImageFormat.jpeg


def check_dimensions(width: int, height: int, max_pixels: int) -> None:
    """Raise DimensionsInvalid unless both sides are positive ints within the pixel budget."""
    if not isinstance(width, int) or not isinstance(height, int):
        raise DimensionsInvalid(f"dimensions must be integers, got {width!r}x{height!r}")
    if width <= 0 or height <= 0:
        raise DimensionsInvalid(f"dimensions must be > 0, got {width}x{height}")
    if width * height > max_pixels:
        raise DimensionsInvalid(f"{width}x{height} exceeds the maximum of {max_pixels} pixels")


@dataclass(frozen=True)
class ThumbnailSpec:
    """
    Full request shape. Its canonical form (see policies.cache_key) is the
    basis for the cache key. Dimensions are checked by validate(), not at
    construction, so that an invalid request can still be logged/keyed.
    """
    file: FileDescriptor
    width: int
    height: int
    options: ResampleOptionSet = field(default_factory=ResampleOptionSet)

    def validate(self, max_pixels: int) -> "ThumbnailSpec":
        check_dimensions(self.width, self.height, max_pixels)
        return self


@dataclass(frozen=True)
class GeneratedImage:
    """Encoded output of the resampling engine, not yet persisted."""
    data: bytes
    width: int
    height: int
    format: ImageFormat


@dataclass(frozen=True)
class ThumbnailArtifact:
    """
    A persisted thumbnail. Written once per cache key and never modified;
    removed only by invalidation or a cleanup sweep.
    """
    key: str
    path: str
    size_bytes: int
    created_at: datetime
    source_hash: str
    width: int
    height: int
    format: ImageFormat

    @property
    def media_type(self) -> str:
        return self.format.media_type

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        d["format"] = self.format.value
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ThumbnailArtifact":
        return cls(
            key=str(d["key"]),
            path=str(d["path"]),
            size_bytes=int(d["size_bytes"]),
            created_at=datetime.fromisoformat(d["created_at"]),
            source_hash=str(d["source_hash"]),
            width=int(d["width"]),
            height=int(d["height"]),
            format=ImageFormat(d["format"]),
        )
