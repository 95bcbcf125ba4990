# photomedia/database/repos/file_index_repo.py
from __future__ import annotations

import mimetypes
import secrets
from pathlib import Path
from typing import Mapping, Optional

from sqlalchemy import select, func, update
from sqlalchemy.orm import Session

from photomedia.common.logging import get_logger
from photomedia.common.path.safe import safe_join
from photomedia.database.models.photo import Photo as DBPhoto, PhotoFile as DBPhotoFile
from photomedia.domain.entities.thumbnail import FileDescriptor
from photomedia.domain.errors import SourceMissing
from photomedia.domain.ports.hashing import HashingPort

logger = get_logger()


def new_uid(prefix: str) -> str:
    return f"{prefix}{secrets.token_hex(8)}"


class SqlAlchemyFileIndexRepo:
    """
    SQLAlchemy-backed file index. Satisfies FileIndexPort for the thumbnail
    engine and offers the few writes the API and tests need.

    `roots` maps the short root names stored in photo_file.file_root
    (e.g. "/" for originals) to directories.
    """

    def __init__(self, db: Session, roots: Mapping[str, Path | str]) -> None:
        self.db = db
        self.roots = {k: Path(v) for k, v in roots.items()}

    # --------- FileIndexPort ---------

    def lookup_file(self, file_id: str) -> FileDescriptor:
        row = self.get(file_id)
        if row is None or row.file_missing:
            raise SourceMissing(f"file {file_id} not indexed or flagged missing")
        root = self.roots.get(row.file_root)
        if root is None:
            raise SourceMissing(f"file {file_id} has unknown root {row.file_root!r}")
        return FileDescriptor(root=str(root), rel_path=row.file_name, content_hash=row.file_hash)

    def mark_missing(self, file_id: str) -> None:
        res = self.db.execute(
            update(DBPhotoFile).where(DBPhotoFile.uid == file_id).values(file_missing=True)
        )
        if res.rowcount:
            logger.info("photo: flagged file %s as missing", file_id)
        self.db.flush()

    # --------- Reads ---------

    def get(self, file_id: str) -> Optional[DBPhotoFile]:
        stmt = select(DBPhotoFile).where(DBPhotoFile.uid == file_id).limit(1)
        return self.db.execute(stmt).scalars().first()

    def path_of(self, row: DBPhotoFile) -> Path:
        root = self.roots.get(row.file_root)
        if root is None:
            raise SourceMissing(f"file {row.uid} has unknown root {row.file_root!r}")
        try:
            return safe_join(root, row.file_name)
        except ValueError as e:
            raise SourceMissing(f"file {row.uid} resolves outside its root") from e

    def is_current_hash(self, content_hash: str) -> bool:
        """True while some present file still has this content (used by the cache sweep)."""
        stmt = (
            select(func.count())
            .select_from(DBPhotoFile)
            .where(DBPhotoFile.file_hash == content_hash, DBPhotoFile.file_missing.is_(False))
        )
        return (self.db.execute(stmt).scalar_one() or 0) > 0

    # --------- Writes ---------

    def register_file(
        self,
        *,
        photo: DBPhoto,
        file_name: str,
        hasher: HashingPort,
        root: str = "/",
        primary: bool = False,
        uid: Optional[str] = None,
    ) -> DBPhotoFile:
        """Hash an original already under `roots[root]` and add it to `photo`."""
        path = safe_join(self.roots[root], file_name)
        obj = DBPhotoFile(
            uid=uid or new_uid("f"),
            file_root=root,
            file_name=file_name,
            file_hash=hasher.content_hash(path),
            file_mime=mimetypes.guess_type(path.name)[0],
            file_size=path.stat().st_size,
            file_primary=primary,
        )
        photo.files.append(obj)
        self.db.flush()
        return obj
