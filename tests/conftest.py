# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Tuple

import pytest
from PIL import Image
from sqlalchemy.orm import Session

from photomedia.common.settings import DBConfig, FeatureFlags, Settings, ThumbsConfig
from photomedia.database.core.main import make_engine
from photomedia.database.models import Base


@pytest.fixture()
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """
    Factory writing a synthetic image and returning its path:
        make_image("a.jpg", (4000, 3000))
    The left half is red and the right half blue so crops can be told apart.
    """
    def _make(
        name: str = "src.jpg",
        size: Tuple[int, int] = (400, 300),
        fmt: str = "JPEG",
        root: Path | None = None,
    ) -> Path:
        base = root or (tmp_path / "originals")
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        w, h = size
        im = Image.new("RGB", size, (255, 0, 0))
        if w > 1:
            im.paste((0, 0, 255), (w // 2, 0, w, h))
        im.save(path, format=fmt)
        return path

    return _make


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        app_env="test",
        data_root=tmp_path,
        db=DBConfig(url="sqlite://"),
        thumbs=ThumbsConfig(workers=2, generation_timeout_sec=10.0, max_pixels=2000 * 2000),
        features=FeatureFlags(backup_yaml=True, reconcile_on_startup=True),
    )


@pytest.fixture()
def db_engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db(db_engine) -> Session:
    with Session(bind=db_engine, future=True) as session:
        yield session
