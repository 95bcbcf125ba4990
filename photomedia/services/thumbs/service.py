# photomedia/services/thumbs/service.py
from __future__ import annotations

import hmac
from typing import Iterable, Optional

from photomedia.common.logging import get_logger
from photomedia.common.path.safe import safe_join
from photomedia.domain.entities.thumbnail import ThumbnailArtifact, ThumbnailSpec, check_dimensions
from photomedia.domain.enums.fallback_reason import FallbackReason
from photomedia.domain.errors import DecodeFailed, SourceCorrupt, SourceMissing, ThumbError, TokenInvalid
from photomedia.domain.policies.resample_options import parse_flags, resolve_options
from photomedia.domain.ports.file_index import FileIndexPort
from photomedia.services.thumbs.coordinator import GenerationCoordinator

logger = get_logger()


def check_token(expected: str, given: Optional[str]) -> None:
    """Raise TokenInvalid unless `given` matches. An empty `expected` disables the check."""
    if not expected:
        return
    if not given or not hmac.compare_digest(expected.encode("utf-8"), given.encode("utf-8")):
        raise TokenInvalid("invalid preview/download token")


def fallback_reason(err: ThumbError) -> FallbackReason:
    if isinstance(err, SourceMissing):
        return FallbackReason.source_missing
    if isinstance(err, TokenInvalid):
        return FallbackReason.token_invalid
    return FallbackReason.source_corrupt


class ThumbnailService:
    """
    Inbound entry point for the HTTP layer:

        get_or_create_thumbnail(file_id, width, height, flags) -> ThumbnailArtifact

    Looks the file up in the index, checks the original is on disk and hands
    the request to the coordinator. Errors are ThumbError subclasses; the
    caller turns them into placeholders.
    """

    def __init__(
        self,
        file_index: FileIndexPort,
        coordinator: GenerationCoordinator,
        *,
        max_pixels: int,
    ) -> None:
        self.index = file_index
        self.coordinator = coordinator
        self.max_pixels = int(max_pixels)

    def get_or_create_thumbnail(
        self,
        file_id: str,
        width: int,
        height: int,
        flags: str | Iterable[str] | None = None,
    ) -> ThumbnailArtifact:
        # bad dimensions are rejected before the index is consulted
        check_dimensions(width, height, self.max_pixels)
        options = resolve_options(*parse_flags(flags))
        desc = self.index.lookup_file(file_id)
        spec = ThumbnailSpec(file=desc, width=width, height=height, options=options)

        try:
            source = safe_join(desc.root, desc.rel_path)
        except ValueError as e:
            raise SourceMissing(f"thumbs: file {file_id} resolves outside its root") from e
        if not source.is_file():
            logger.error("thumbs: file %s is missing (%s)", file_id, desc.rel_path)
            raise SourceMissing(f"thumbs: file {file_id} not found on disk")

        try:
            return self.coordinator.request(spec, source)
        except DecodeFailed as e:
            raise SourceCorrupt(str(e)) from e
