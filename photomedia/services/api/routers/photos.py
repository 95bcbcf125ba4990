# photomedia/services/api/routers/photos.py
from __future__ import annotations

from http import HTTPStatus
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from photomedia.common.logging import get_logger
from photomedia.common.settings import Settings
from photomedia.database.models.photo import Photo as DBPhoto
from photomedia.database.repos.file_index_repo import SqlAlchemyFileIndexRepo
from photomedia.database.repos.photo_repo import SqlAlchemyPhotoRepo
from photomedia.domain.errors import SourceMissing, ThumbError
from photomedia.services.api.deps import get_app_settings, get_fallback, get_file_index, transactional_session
from photomedia.services.api.routers.thumbs import placeholder_response
from photomedia.services.photos.sidecar import photo_yaml, save_photo_yaml
from photomedia.services.schemas import PhotoEnvelope, PhotoRead, PhotoUpdate
from photomedia.services.thumbs.fallback import FallbackResolver
from photomedia.services.thumbs.service import check_token

logger = get_logger()

router = APIRouter(prefix="/photos", tags=["photos"])


def _get_or_404(repo: SqlAlchemyPhotoRepo, uid: str) -> DBPhoto:
    photo = repo.get_by_uid(uid)
    if photo is None:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Photo not found")
    return photo


def _saved(photo: DBPhoto, cfg: Settings) -> None:
    save_photo_yaml(photo, cfg.sidecar_root, enabled=cfg.features.backup_yaml)


@router.get("/{uid}", response_model=PhotoRead)
def get_photo(uid: str, db: Session = Depends(transactional_session)) -> PhotoRead:
    return PhotoRead.model_validate(_get_or_404(SqlAlchemyPhotoRepo(db), uid))


@router.put("/{uid}", response_model=PhotoRead)
def update_photo(
    uid: str,
    payload: PhotoUpdate,
    db: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
) -> PhotoRead:
    repo = SqlAlchemyPhotoRepo(db)
    photo = _get_or_404(repo, uid)
    repo.update(photo, **payload.model_dump(exclude_unset=True))
    # Privacy changes do not touch the thumbnail cache: artifacts are keyed by
    # content and served only with a valid preview token.
    _saved(photo, cfg)
    logger.info("photo: changes saved for %s", uid)
    return PhotoRead.model_validate(photo)


@router.post("/{uid}/approve", response_model=PhotoEnvelope)
def approve_photo(
    uid: str,
    db: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
) -> PhotoEnvelope:
    repo = SqlAlchemyPhotoRepo(db)
    photo = repo.approve(_get_or_404(repo, uid))
    _saved(photo, cfg)
    return PhotoEnvelope(photo=PhotoRead.model_validate(photo))


@router.post("/{uid}/like", response_model=PhotoEnvelope)
def like_photo(
    uid: str,
    db: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
) -> PhotoEnvelope:
    repo = SqlAlchemyPhotoRepo(db)
    photo = repo.set_favorite(_get_or_404(repo, uid), True)
    _saved(photo, cfg)
    return PhotoEnvelope(photo=PhotoRead.model_validate(photo))


@router.delete("/{uid}/like", response_model=PhotoEnvelope)
def dislike_photo(
    uid: str,
    db: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
) -> PhotoEnvelope:
    repo = SqlAlchemyPhotoRepo(db)
    photo = repo.set_favorite(_get_or_404(repo, uid), False)
    _saved(photo, cfg)
    return PhotoEnvelope(photo=PhotoRead.model_validate(photo))


@router.post("/{uid}/files/{file_uid}/primary", response_model=PhotoRead)
def set_primary_file(
    uid: str,
    file_uid: str,
    db: Session = Depends(transactional_session),
) -> PhotoRead:
    try:
        photo = SqlAlchemyPhotoRepo(db).set_primary(uid, file_uid)
    except LookupError as e:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(e)) from e
    return PhotoRead.model_validate(photo)


@router.get("/{uid}/yaml")
def get_photo_yaml(
    uid: str,
    download: Optional[str] = Query(None),
    db: Session = Depends(transactional_session),
) -> Response:
    photo = _get_or_404(SqlAlchemyPhotoRepo(db), uid)
    headers = {}
    if download:
        headers["Content-Disposition"] = f'attachment; filename="{photo.uid}.yml"'
    return Response(content=photo_yaml(photo), media_type="text/x-yaml; charset=utf-8", headers=headers)


@router.get("/{uid}/dl")
def download_photo(
    uid: str,
    t: Optional[str] = Query(None, description="Download token"),
    db: Session = Depends(transactional_session),
    index: SqlAlchemyFileIndexRepo = Depends(get_file_index),
    fallback: FallbackResolver = Depends(get_fallback),
    cfg: Settings = Depends(get_app_settings),
) -> Response:
    """Original of the photo's primary file, as an attachment."""
    file_uid: Optional[str] = None
    try:
        check_token(cfg.thumbs.download_token, t)
        photo = SqlAlchemyPhotoRepo(db).get_by_uid(uid)
        f = photo.primary_file() if photo is not None else None
        if f is None:
            raise SourceMissing(f"photo {uid} has no primary file")
        file_uid = f.uid
        path = index.path_of(f)
        if not path.is_file():
            logger.error("photo: file %s is missing", f.file_name)
            raise SourceMissing(f"file {f.uid} not found on disk")
    except ThumbError as e:
        return placeholder_response(e, fallback, file_uid)
    return FileResponse(path, media_type=f.file_mime or "application/octet-stream", filename=f.download_name())
