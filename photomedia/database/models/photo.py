# photomedia/database/models/photo.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Text, Index, false, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photomedia.database.core.main import Base
from photomedia.database.core.service_object import ServiceObject


class Photo(ServiceObject, Base):
    __tablename__ = "photo"

    uid: Mapped[str] = mapped_column(String(42), unique=True, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # curation / review
    favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)
    private: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    files: Mapped[List["PhotoFile"]] = relationship(
        back_populates="photo", cascade="all,delete-orphan", passive_deletes=True,
        order_by="PhotoFile.id",
    )

    def primary_file(self) -> Optional["PhotoFile"]:
        for f in self.files:
            if f.file_primary:
                return f
        return None


class PhotoFile(ServiceObject, Base):
    __tablename__ = "photo_file"
    __table_args__ = (
        Index("ix_photo_file_hash", "file_hash"),
    )

    uid: Mapped[str] = mapped_column(String(42), unique=True, nullable=False)
    photo_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("photo.id", ondelete="CASCADE"), nullable=False
    )

    # location: <roots[file_root]>/<file_name>
    file_root: Mapped[str] = mapped_column(String(16), nullable=False, server_default=text("'/'"), default="/")
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    file_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    file_mime: Mapped[Optional[str]] = mapped_column(String(64))
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False, server_default=text("0"), default=0)

    file_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)
    file_missing: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false(), default=False)

    photo: Mapped[Photo] = relationship(back_populates="files")

    def download_name(self) -> str:
        return self.file_name.replace("\\", "/").rsplit("/", 1)[-1]
