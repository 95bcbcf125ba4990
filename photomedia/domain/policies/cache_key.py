# photomedia/domain/policies/cache_key.py
from __future__ import annotations

import hashlib

from photomedia.domain.entities.thumbnail import ThumbnailSpec

# Bump when the canonical form or the encoder output changes meaningfully;
# old artifacts then simply stop being addressed and age out in the sweep.
KEY_VERSION = "v1"


def canonical_form(spec: ThumbnailSpec) -> str:
    """
    Fixed-order serialization of everything that affects the output bytes.
    The file location is not included: the same content at two paths shares
    its thumbnails, and new content always yields a new key.
    """
    o = spec.options
    return "|".join(
        (
            KEY_VERSION,
            spec.file.content_hash,
            f"{int(spec.width)}x{int(spec.height)}",
            o.method.value,
            o.filter.value,
            o.format.value,
        )
    )


def derive_cache_key(spec: ThumbnailSpec) -> str:
    return hashlib.sha256(canonical_form(spec).encode("utf-8")).hexdigest()
