from photomedia.domain.enums.resample import ResampleOption, ResampleMethod, ResampleFilter, ImageFormat
from photomedia.domain.enums.fallback_reason import FallbackReason
__all__ = [
    "ResampleOption",
    "ResampleMethod",
    "ResampleFilter",
    "ImageFormat",
    "FallbackReason",
]
