# photomedia/services/schemas/thumbs.py
from __future__ import annotations
from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field


class SweepRequest(BaseModel):
    # None -> use thumbs.cache_max_bytes from settings
    max_bytes: Optional[int] = Field(None, ge=0)


class SweepResponse(BaseModel):
    started_at: datetime
    finished_at: datetime
    scanned: int
    stale_removed: int
    evicted: int
    bytes_freed: int
    bytes_remaining: int
    errors: int
    error_details: List[Tuple[str, str]] = Field(default_factory=list)


class ThumbStats(BaseModel):
    cached: int
    cached_bytes: int
    hits: int
    generations: int
    failures: int
    in_flight: int
