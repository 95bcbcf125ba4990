# tests/services/conftest.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import pytest
from starlette.testclient import TestClient

from photomedia.database.repos.file_index_repo import SqlAlchemyFileIndexRepo
from photomedia.database.repos.photo_repo import SqlAlchemyPhotoRepo
from photomedia.services.api.app import create_app
from photomedia.services.hashing.simple_hashing import SimpleHashing


@dataclass
class Seeded:
    photo_uid: str
    file_uid: str
    file_hash: str


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def api_client(app):
    """
    TestClient over an app wired to tmp dirs and in-memory SQLite. Entering
    the client runs the lifespan (schema creation, cache reconcile); leaving
    it shuts the generation pool down.
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def seed_photo(app, settings, make_image) -> Callable[..., Seeded]:
    """
    Write an original under originals_root and index it as the primary file
    of a new photo. Call after `api_client` so the schema exists.
    """
    def _seed(name: str = "2024/a.jpg", size=(4000, 3000), *, title: str | None = None) -> Seeded:
        make_image(name, size)
        with app.state.sessionmaker() as db, db.begin():
            photo = SqlAlchemyPhotoRepo(db).create(title=title)
            index = SqlAlchemyFileIndexRepo(db, roots={"/": settings.originals_root})
            f = index.register_file(photo=photo, file_name=name, hasher=SimpleHashing(), primary=True)
            return Seeded(photo_uid=photo.uid, file_uid=f.uid, file_hash=f.file_hash)

    return _seed
