# photomedia/domain/enums/resample.py
from __future__ import annotations

from enum import StrEnum


class ResampleOption(StrEnum):
    """Flags accepted by resolve_options(); query strings use these values."""
    fill_center = "center"
    fill_top_left = "left"
    fill_bottom_right = "right"
    fit = "fit"
    resize = "resize"
    nearest_neighbor = "nearest"
    default_filter = "default"
    png = "png"


class ResampleMethod(StrEnum):
    fill_center = "fill_center"
    fill_top_left = "fill_top_left"
    fill_bottom_right = "fill_bottom_right"
    fit = "fit"
    resize = "resize"


class ResampleFilter(StrEnum):
    default = "default"   # Lanczos
    nearest = "nearest"


class ImageFormat(StrEnum):
    jpeg = "jpeg"
    png = "png"

    @property
    def ext(self) -> str:
        return "jpg" if self is ImageFormat.jpeg else "png"

    @property
    def media_type(self) -> str:
        return f"image/{self.value}"
