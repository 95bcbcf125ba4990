from __future__ import annotations
from enum import StrEnum

class FallbackReason(StrEnum):
    source_missing = "source_missing"
    source_corrupt = "source_corrupt"
    token_invalid = "token_invalid"
