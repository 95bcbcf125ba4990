from pathlib import Path

import pytest
from PIL import Image

from photomedia.domain.entities.thumbnail import FileDescriptor
from photomedia.domain.enums import ImageFormat
from photomedia.domain.errors import DimensionsInvalid, SourceCorrupt, SourceMissing, TokenInvalid
from photomedia.services.thumbs.coordinator import GenerationCoordinator
from photomedia.services.thumbs.resampler import ResamplingEngine
from photomedia.services.thumbs.service import ThumbnailService, check_token, fallback_reason
from photomedia.services.thumbs.store import FilesystemThumbnailStore


class _MemIndex:
    """In-memory FileIndexPort."""

    def __init__(self, root: Path):
        self.root = root
        self.files = {}
        self.missing = []

    def add(self, file_id, rel_path, content_hash):
        self.files[file_id] = FileDescriptor(str(self.root), rel_path, content_hash)

    def lookup_file(self, file_id):
        if file_id not in self.files:
            raise SourceMissing(file_id)
        return self.files[file_id]

    def mark_missing(self, file_id):
        self.missing.append(file_id)


@pytest.fixture
def service_env(tmp_path):
    index = _MemIndex(tmp_path / "originals")
    coord = GenerationCoordinator(
        FilesystemThumbnailStore(tmp_path / "cache"), ResamplingEngine(), workers=2, timeout_sec=10
    )
    svc = ThumbnailService(index, coord, max_pixels=2000 * 2000)
    yield svc, index, coord
    coord.shutdown()


def test_fit_thumbnail_is_generated_then_served_from_cache(service_env, make_image):
    svc, index, coord = service_env
    make_image("2024/a.jpg", (4000, 3000))
    index.add("f1", "2024/a.jpg", "hash-a")

    art = svc.get_or_create_thumbnail("f1", 720, 720)
    assert (art.width, art.height) == (720, 540)
    assert art.format is ImageFormat.jpeg
    with Image.open(art.path) as im:
        assert im.size == (720, 540)

    again = svc.get_or_create_thumbnail("f1", 720, 720)
    assert again.path == art.path
    assert coord.generations == 1
    assert coord.stats()["hits"] == 1


def test_flags_change_the_artifact(service_env, make_image):
    svc, index, _ = service_env
    make_image("a.jpg", (400, 300))
    index.add("f1", "a.jpg", "hash-a")

    fit = svc.get_or_create_thumbnail("f1", 100, 100)
    crop = svc.get_or_create_thumbnail("f1", 100, 100, "center,png")
    assert fit.key != crop.key
    assert crop.format is ImageFormat.png
    assert (crop.width, crop.height) == (100, 100)
    assert crop.path.endswith(".png")


def test_new_content_hash_gets_a_new_artifact(service_env, make_image):
    svc, index, _ = service_env
    make_image("a.jpg", (400, 300))
    index.add("f1", "a.jpg", "hash-1")
    old = svc.get_or_create_thumbnail("f1", 50, 50)

    index.add("f1", "a.jpg", "hash-2")
    new = svc.get_or_create_thumbnail("f1", 50, 50)
    assert new.key != old.key
    assert Path(old.path).exists()  # left for the sweep


def test_unknown_file_is_missing(service_env):
    svc, _, _ = service_env
    with pytest.raises(SourceMissing):
        svc.get_or_create_thumbnail("nope", 100, 100)


def test_indexed_but_absent_original_is_missing(service_env):
    svc, index, coord = service_env
    index.add("f1", "gone.jpg", "hash-a")
    with pytest.raises(SourceMissing):
        svc.get_or_create_thumbnail("f1", 100, 100)
    assert coord.generations == 0


def test_path_escaping_the_root_is_missing(service_env):
    svc, index, _ = service_env
    index.add("f1", "../../etc/passwd", "hash-a")
    with pytest.raises(SourceMissing):
        svc.get_or_create_thumbnail("f1", 100, 100)


def test_undecodable_original_is_corrupt(service_env):
    svc, index, _ = service_env
    p = index.root / "bad.jpg"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(b"definitely not a jpeg")
    index.add("f1", "bad.jpg", "hash-bad")
    with pytest.raises(SourceCorrupt):
        svc.get_or_create_thumbnail("f1", 100, 100)


@pytest.mark.parametrize("w, h", [(0, 100), (100, -1), (5000, 5000)])
def test_bad_dimensions_rejected(service_env, make_image, w, h):
    svc, index, coord = service_env
    make_image("a.jpg", (40, 30))
    index.add("f1", "a.jpg", "hash-a")
    with pytest.raises(DimensionsInvalid):
        svc.get_or_create_thumbnail("f1", w, h)
    assert coord.generations == 0


def test_check_token():
    check_token("", None)
    check_token("s3cret", "s3cret")
    with pytest.raises(TokenInvalid):
        check_token("s3cret", None)
    with pytest.raises(TokenInvalid):
        check_token("s3cret", "guess")


def test_fallback_reason_mapping():
    assert fallback_reason(SourceMissing("x")).value == "source_missing"
    assert fallback_reason(SourceCorrupt("x")).value == "source_corrupt"
    assert fallback_reason(TokenInvalid("x")).value == "token_invalid"


def test_dimensions_are_checked_before_the_index():
    class _ExplodingIndex:
        def lookup_file(self, file_id):
            raise AssertionError("index must not be consulted")

        def mark_missing(self, file_id):
            raise AssertionError("index must not be consulted")

    svc = ThumbnailService(_ExplodingIndex(), coordinator=None, max_pixels=100)
    with pytest.raises(DimensionsInvalid):
        svc.get_or_create_thumbnail("unknown", 0, 0)
    with pytest.raises(DimensionsInvalid):
        svc.get_or_create_thumbnail("unknown", 20, 20)
