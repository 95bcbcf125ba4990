# photomedia/services/api/deps.py
from __future__ import annotations
from typing import Generator
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from photomedia.common.settings import Settings
from photomedia.database.core.transaction import transactional
from photomedia.database.repos.file_index_repo import SqlAlchemyFileIndexRepo
from photomedia.services.thumbs.fallback import FallbackResolver
from photomedia.services.thumbs.runtime import ThumbRuntime
from photomedia.services.thumbs.service import ThumbnailService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_thumb_runtime(request: Request) -> ThumbRuntime:
    return request.app.state.thumbs


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.sessionmaker()
    try:
        yield db
    finally:
        db.close()


def transactional_session(db: Session = Depends(get_db)) -> Generator[Session, None, None]:
    """
    Request-scoped transaction: COMMIT on normal exit, ROLLBACK if an
    exception bubbles out. Placeholder responses are normal exits, so a
    mark-missing update made while serving one is kept.
    """
    with transactional(db):
        yield db


def get_file_index(
    db: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
) -> SqlAlchemyFileIndexRepo:
    return SqlAlchemyFileIndexRepo(db, roots={"/": cfg.originals_root, "sidecar": cfg.sidecar_root})


def get_thumbnail_service(
    index: SqlAlchemyFileIndexRepo = Depends(get_file_index),
    rt: ThumbRuntime = Depends(get_thumb_runtime),
    cfg: Settings = Depends(get_app_settings),
) -> ThumbnailService:
    return ThumbnailService(index, rt.coordinator, max_pixels=cfg.thumbs.max_pixels)


def get_fallback(index: SqlAlchemyFileIndexRepo = Depends(get_file_index)) -> FallbackResolver:
    return FallbackResolver(on_missing=index.mark_missing)
