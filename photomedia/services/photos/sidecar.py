# photomedia/services/photos/sidecar.py
from __future__ import annotations

from pathlib import Path

import yaml

from photomedia.common.logging import get_logger
from photomedia.database.models.photo import Photo as DBPhoto
from photomedia.services.schemas.photos import PhotoRead

logger = get_logger()


def photo_yaml(photo: DBPhoto) -> bytes:
    """Serialize a photo and its files as YAML (keys in declaration order)."""
    data = PhotoRead.model_validate(photo).model_dump(mode="json")
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True).encode("utf-8")


def sidecar_path(sidecar_root: Path, photo_uid: str) -> Path:
    return Path(sidecar_root) / f"{photo_uid}.yml"


def save_photo_yaml(photo: DBPhoto, sidecar_root: Path, *, enabled: bool = True) -> None:
    """Write the YAML backup next to the other sidecars. Failures are logged, never raised."""
    if not enabled:
        return
    path = sidecar_path(sidecar_root, photo.uid)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(photo_yaml(photo))
    except (OSError, yaml.YAMLError) as e:
        logger.error("photo: %s (update yaml)", e)
    else:
        logger.debug("photo: updated yaml file %s", path.name)
