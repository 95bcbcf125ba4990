from photomedia.services.schemas.photos import (
    PhotoRead,
    PhotoFileRead,
    PhotoUpdate,
    PhotoEnvelope,
)
from photomedia.services.schemas.thumbs import (
    SweepRequest,
    SweepResponse,
    ThumbStats,
)

__all__ = [
    "PhotoRead",
    "PhotoFileRead",
    "PhotoUpdate",
    "PhotoEnvelope",
    "SweepRequest",
    "SweepResponse",
    "ThumbStats",
]
