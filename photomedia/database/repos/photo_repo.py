# photomedia/database/repos/photo_repo.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from photomedia.database.models.photo import Photo as DBPhoto, PhotoFile as DBPhotoFile
from photomedia.database.repos.file_index_repo import new_uid


class SqlAlchemyPhotoRepo:
    def __init__(self, session: Session) -> None:
        self.db = session

    # --------- Reads ---------

    def get_by_uid(self, uid: str) -> Optional[DBPhoto]:
        stmt = (
            select(DBPhoto)
            .options(selectinload(DBPhoto.files))
            .where(DBPhoto.uid == uid)
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    # --------- Writes ---------

    def create(self, *, uid: Optional[str] = None, title: Optional[str] = None) -> DBPhoto:
        obj = DBPhoto(uid=uid or new_uid("p"), title=title)
        self.db.add(obj)
        self.db.flush()
        return obj

    def approve(self, photo: DBPhoto) -> DBPhoto:
        if not photo.approved:
            photo.approved = True
            photo.approved_at = datetime.now(timezone.utc)
        self.db.flush()
        return photo

    def set_favorite(self, photo: DBPhoto, favorite: bool) -> DBPhoto:
        photo.favorite = bool(favorite)
        self.db.flush()
        return photo

    def update(self, photo: DBPhoto, **fields) -> DBPhoto:
        for name in ("title", "description", "private", "favorite"):
            if name in fields and fields[name] is not None:
                setattr(photo, name, fields[name])
        self.db.flush()
        return photo

    def set_primary(self, photo_uid: str, file_uid: str) -> DBPhoto:
        """Make `file_uid` the only primary file of the photo. Raises LookupError if either is unknown."""
        photo = self.get_by_uid(photo_uid)
        if photo is None:
            raise LookupError(f"photo {photo_uid} not found")
        target: Optional[DBPhotoFile] = next((f for f in photo.files if f.uid == file_uid), None)
        if target is None:
            raise LookupError(f"file {file_uid} does not belong to photo {photo_uid}")
        for f in photo.files:
            f.file_primary = f is target
        self.db.flush()
        return photo
