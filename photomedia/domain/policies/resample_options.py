# photomedia/domain/policies/resample_options.py
from __future__ import annotations

from typing import Iterable, List

from photomedia.domain.entities.thumbnail import ResampleOptionSet
from photomedia.domain.enums.resample import (
    ImageFormat,
    ResampleFilter,
    ResampleMethod,
    ResampleOption,
)

_METHODS = {
    ResampleOption.fill_center: ResampleMethod.fill_center,
    ResampleOption.fill_top_left: ResampleMethod.fill_top_left,
    ResampleOption.fill_bottom_right: ResampleMethod.fill_bottom_right,
    ResampleOption.fit: ResampleMethod.fit,
    ResampleOption.resize: ResampleMethod.resize,
}

_FILTERS = {
    ResampleOption.nearest_neighbor: ResampleFilter.nearest,
    ResampleOption.default_filter: ResampleFilter.default,
}


def resolve_options(*flags: ResampleOption | str) -> ResampleOptionSet:
    """
    Fold a flag list into (method, filter, format). Later flags override
    earlier ones on the same axis; unknown flags are ignored.

        resolve_options("center", "fit")   -> method=fit
        resolve_options("png", "nearest")  -> filter=nearest, format=png
    """
    method = ResampleMethod.fit
    filter_ = ResampleFilter.default
    format_ = ImageFormat.jpeg

    for raw in flags:
        try:
            opt = ResampleOption(raw)
        except ValueError:
            continue
        if opt in _METHODS:
            method = _METHODS[opt]
        elif opt in _FILTERS:
            filter_ = _FILTERS[opt]
        elif opt is ResampleOption.png:
            format_ = ImageFormat.png

    return ResampleOptionSet(method=method, filter=filter_, format=format_)


def parse_flags(v: str | Iterable[str] | None) -> List[str]:
    """Split "center, png" (or a list of such strings) into lowercase tokens, order kept."""
    if v is None:
        return []
    parts = [v] if isinstance(v, str) else list(v)
    out: List[str] = []
    for p in parts:
        out.extend(s.strip().lower() for s in str(p).split(",") if s.strip())
    return out
