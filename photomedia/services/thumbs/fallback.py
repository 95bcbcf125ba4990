# photomedia/services/thumbs/fallback.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from photomedia.common.logging import get_logger
from photomedia.domain.enums.fallback_reason import FallbackReason

logger = get_logger()

SVG_MEDIA_TYPE = "image/svg+xml"

PHOTO_ICON_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24">'
    b'<path fill="none" d="M0 0h24v24H0z"/>'
    b'<path fill="#9e9e9e" d="M21 19V5c0-1.1-.9-2-2-2H5c-1.1 0-2 .9-2 2v14c0 1.1.9 2 2 2h14'
    b'c1.1 0 2-.9 2-2zM8.5 13.5l2.5 3.01L14.5 12l4.5 6H5l3.5-4.5z"/></svg>'
)

BROKEN_ICON_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24">'
    b'<path fill="none" d="M0 0h24v24H0z"/>'
    b'<path fill="#9e9e9e" d="M21 5v6.59l-3-3.01-4 4.01-4-4-4 4-3-3.01V5c0-1.1.9-2 2-2h14'
    b'c1.1 0 2 .9 2 2zm-3 6.42l3 3.01V19c0 1.1-.9 2-2 2H5c-1.1 0-2-.9-2-2v-6.58l3 2.99 '
    b'4-4 4 4 4-3.99z"/></svg>'
)


@dataclass(frozen=True)
class Placeholder:
    data: bytes
    media_type: str = SVG_MEDIA_TYPE


_PLACEHOLDERS: Dict[FallbackReason, Placeholder] = {
    FallbackReason.source_missing: Placeholder(BROKEN_ICON_SVG),
    FallbackReason.source_corrupt: Placeholder(BROKEN_ICON_SVG),
    FallbackReason.token_invalid: Placeholder(PHOTO_ICON_SVG),
}


class FallbackResolver:
    """
    Picks the static placeholder for a failed thumbnail/download and, for a
    missing source, tells the file index so the record drops out of listings.
    """

    def __init__(self, on_missing: Optional[Callable[[str], None]] = None) -> None:
        self._on_missing = on_missing

    def resolve(self, reason: FallbackReason | str, file_id: Optional[str] = None) -> Placeholder:
        reason = FallbackReason(reason)
        if reason is FallbackReason.source_missing and file_id and self._on_missing is not None:
            try:
                self._on_missing(file_id)
            except Exception as e:
                # best effort: the placeholder is served regardless
                logger.error("thumbs: cannot flag file %s as missing: %s", file_id, e)
        return _PLACEHOLDERS[reason]
