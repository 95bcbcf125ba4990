# photomedia/domain/errors.py
"""
Errors raised by the thumbnail engine.

Each class carries a stable `code` (used in logs and API error headers) and
the HTTP status the API layer answers with. The engine never formats
user-facing text; messages here are for logs.
"""
from __future__ import annotations

from http import HTTPStatus


class ThumbError(Exception):
    """Base exception for all thumbnail engine errors."""

    code: str = "thumb_error"
    http_status: int = HTTPStatus.INTERNAL_SERVER_ERROR


class DecodeFailed(ThumbError):
    """Source bytes are not a decodable image."""

    code = "decode_failed"
    http_status = HTTPStatus.UNPROCESSABLE_ENTITY


class DimensionsInvalid(ThumbError):
    """Width/height is zero or the pixel count exceeds the configured maximum."""

    code = "dimensions_invalid"
    http_status = HTTPStatus.BAD_REQUEST


class GenerationFailed(ThumbError):
    """Generation broke for a reason outside the other categories (worker pool gone, library bug)."""

    code = "generation_failed"
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR


class EncodeFailed(ThumbError):
    code = "encode_failed"
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR


class WriteFailed(ThumbError):
    """The cache medium rejected the write (disk full, permissions...)."""

    code = "write_failed"
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR


class GenerationTimeout(ThumbError):
    """The caller gave up waiting; the generation itself keeps running."""

    code = "generation_timeout"
    http_status = HTTPStatus.SERVICE_UNAVAILABLE


class SourceMissing(ThumbError):
    code = "source_missing"
    http_status = HTTPStatus.NOT_FOUND


class SourceCorrupt(ThumbError):
    code = "source_corrupt"
    http_status = HTTPStatus.UNPROCESSABLE_ENTITY


class TokenInvalid(ThumbError):
    code = "token_invalid"
    http_status = HTTPStatus.NOT_FOUND
