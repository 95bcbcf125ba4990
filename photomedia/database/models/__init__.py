# photomedia/database/models/__init__.py

from photomedia.database.models.photo import (
    Base,
    Photo,
    PhotoFile,
)

__all__ = [
    "Base",
    "Photo",
    "PhotoFile",
]
