# photomedia/services/schemas/photos.py
from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class PhotoFileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    file_root: str
    file_name: str
    file_hash: str
    file_mime: Optional[str] = None
    file_size: int = 0
    file_primary: bool = False
    file_missing: bool = False


class PhotoRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    title: Optional[str] = None
    description: Optional[str] = None
    favorite: bool = False
    private: bool = False
    approved: bool = False
    approved_at: Optional[datetime] = None
    files: List[PhotoFileRead] = Field(default_factory=list)


class PhotoUpdate(BaseModel):
    """PUT body; omitted fields keep their stored value."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=4096)
    private: Optional[bool] = None
    favorite: Optional[bool] = None


class PhotoEnvelope(BaseModel):
    photo: PhotoRead
