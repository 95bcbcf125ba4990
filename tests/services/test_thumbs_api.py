import io
from pathlib import Path

from PIL import Image

from photomedia.database.repos.file_index_repo import SqlAlchemyFileIndexRepo
from photomedia.services.thumbs.fallback import BROKEN_ICON_SVG, PHOTO_ICON_SVG

API = "/api/v1"


def _thumb_url(file_uid, w, h, **params):
    return f"{API}/thumbs/{file_uid}/{w}/{h}", params


def test_fit_thumbnail_over_http(api_client, seed_photo):
    s = seed_photo(size=(4000, 3000))
    url, params = _thumb_url(s.file_uid, 720, 720)
    r = api_client.get(url, params=params)
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/jpeg"
    assert "immutable" in r.headers["cache-control"]
    with Image.open(io.BytesIO(r.content)) as im:
        assert im.size == (720, 540)

    # served again from the cache, byte for byte
    r2 = api_client.get(url, params=params)
    assert r2.content == r.content
    stats = api_client.get(f"{API}/thumbs/stats").json()
    assert stats["generations"] == 1
    assert stats["hits"] == 1
    assert stats["cached"] == 1


def test_center_crop_png_over_http(api_client, seed_photo):
    s = seed_photo(size=(4000, 3000))
    url, params = _thumb_url(s.file_uid, 224, 224, flags="center,png")
    r = api_client.get(url, params=params)
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    with Image.open(io.BytesIO(r.content)) as im:
        assert im.size == (224, 224)


def test_missing_original_serves_placeholder_and_flags_file(api_client, seed_photo, settings, app):
    s = seed_photo("gone.jpg", (200, 100))
    (settings.originals_root / "gone.jpg").unlink()

    url, params = _thumb_url(s.file_uid, 100, 100)
    r = api_client.get(url, params=params)
    assert r.status_code == 404
    assert r.headers["content-type"].startswith("image/svg+xml")
    assert r.headers["x-error-code"] == "source_missing"
    assert r.headers["cache-control"] == "no-store"
    assert r.content == BROKEN_ICON_SVG

    with app.state.sessionmaker() as db:
        row = SqlAlchemyFileIndexRepo(db, roots={"/": settings.originals_root}).get(s.file_uid)
        assert row.file_missing is True

    # the flag sticks: later requests miss at the index without touching disk
    assert api_client.get(url, params=params).status_code == 404


def test_corrupt_original_is_422(api_client, seed_photo, settings):
    s = seed_photo("bad.jpg", (200, 100))
    Path(settings.originals_root / "bad.jpg").write_bytes(b"\xff\xd8\xff garbage")
    r = api_client.get(f"{API}/thumbs/{s.file_uid}/100/100")
    assert r.status_code == 422
    assert r.headers["x-error-code"] == "source_corrupt"
    assert r.content == BROKEN_ICON_SVG


def test_unknown_file_is_404(api_client):
    r = api_client.get(f"{API}/thumbs/fnope/100/100")
    assert r.status_code == 404
    assert r.headers["x-error-code"] == "source_missing"


def test_invalid_dimensions_are_400(api_client, seed_photo):
    s = seed_photo(size=(100, 100))
    r = api_client.get(f"{API}/thumbs/{s.file_uid}/0/100")
    assert r.status_code == 400
    assert r.headers["x-error-code"] == "dimensions_invalid"
    r = api_client.get(f"{API}/thumbs/{s.file_uid}/5000/5000")
    assert r.status_code == 400


def test_preview_token_is_enforced(settings, make_image):
    from starlette.testclient import TestClient

    from photomedia.database.repos.photo_repo import SqlAlchemyPhotoRepo
    from photomedia.services.api.app import create_app
    from photomedia.services.hashing.simple_hashing import SimpleHashing

    settings.thumbs.preview_token = "s3cret"
    app = create_app(settings)
    make_image("a.jpg", (100, 80))
    with TestClient(app) as client:
        with app.state.sessionmaker() as db, db.begin():
            photo = SqlAlchemyPhotoRepo(db).create()
            f = SqlAlchemyFileIndexRepo(db, roots={"/": settings.originals_root}).register_file(
                photo=photo, file_name="a.jpg", hasher=SimpleHashing(), primary=True
            )
            file_uid = f.uid

        r = client.get(f"{API}/thumbs/{file_uid}/50/50", params={"t": "wrong"})
        assert r.status_code == 404
        assert r.headers["x-error-code"] == "token_invalid"
        assert r.content == PHOTO_ICON_SVG

        r = client.get(f"{API}/thumbs/{file_uid}/50/50", params={"t": "s3cret"})
        assert r.status_code == 200


def test_sweep_drops_thumbnails_of_replaced_content(api_client, seed_photo, settings, app):
    s = seed_photo("a.jpg", (300, 200))
    assert api_client.get(f"{API}/thumbs/{s.file_uid}/50/50").status_code == 200

    # the original is replaced: re-index it with a new hash
    with app.state.sessionmaker() as db, db.begin():
        row = SqlAlchemyFileIndexRepo(db, roots={"/": settings.originals_root}).get(s.file_uid)
        row.file_hash = "0" * 64

    r = api_client.post(f"{API}/thumbs/sweep", json={})
    assert r.status_code == 200
    body = r.json()
    assert body["scanned"] == 1
    assert body["stale_removed"] == 1
    assert api_client.get(f"{API}/thumbs/stats").json()["cached"] == 0


def test_sweep_evicts_down_to_capacity(api_client, seed_photo):
    s = seed_photo("a.jpg", (300, 200))
    for w in (40, 50, 60):
        assert api_client.get(f"{API}/thumbs/{s.file_uid}/{w}/{w}").status_code == 200

    r = api_client.post(f"{API}/thumbs/sweep", json={"max_bytes": 0})
    body = r.json()
    assert body["evicted"] == 3
    assert body["bytes_remaining"] == 0


def test_health(api_client, settings):
    settings.originals_root.mkdir(parents=True, exist_ok=True)
    body = api_client.get("/healthz").json()
    assert body["ok"] is True
    assert body["env"] == "test"
    assert body["thumbs_in_flight"] == 0


def test_unknown_file_with_bad_dimensions_is_400(api_client):
    r = api_client.get(f"{API}/thumbs/fnope/0/0")
    assert r.status_code == 400
    assert r.headers["x-error-code"] == "dimensions_invalid"


def test_generation_pool_down_still_serves_a_placeholder(api_client, seed_photo, app):
    s = seed_photo("a.jpg", (200, 100))
    app.state.thumbs.coordinator.shutdown()
    r = api_client.get(f"{API}/thumbs/{s.file_uid}/100/100")
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("image/svg+xml")
    assert r.headers["x-error-code"] == "generation_failed"
    assert r.content == BROKEN_ICON_SVG
