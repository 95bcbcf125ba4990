from __future__ import annotations

from pathlib import PurePosixPath

from photomedia.domain.enums.resample import ImageFormat


def artifact_rel_path(key: str, fmt: ImageFormat) -> PurePosixPath:
    """
    Domain policy for where an artifact lives *relative to the cache root*.
    Two levels of sharding by key prefix keep directories small:

        ab/cd/abcd....<ext>
    """
    if len(key) < 8:
        raise ValueError(f"cache key too short: {key!r}")
    return PurePosixPath(key[0:2], key[2:4], f"{key}.{fmt.ext}")


def sidecar_rel_path(key: str) -> PurePosixPath:
    """Metadata file next to the artifact; its presence marks the artifact as complete."""
    if len(key) < 8:
        raise ValueError(f"cache key too short: {key!r}")
    return PurePosixPath(key[0:2], key[2:4], f"{key}.json")
