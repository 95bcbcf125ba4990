from dataclasses import replace

import pytest

from photomedia.domain.entities.thumbnail import FileDescriptor, ResampleOptionSet, ThumbnailSpec
from photomedia.domain.enums import ImageFormat, ResampleFilter, ResampleMethod
from photomedia.domain.policies.cache_key import canonical_form, derive_cache_key


def _spec(**kw) -> ThumbnailSpec:
    base = ThumbnailSpec(
        file=FileDescriptor(root="/originals", rel_path="2024/a.jpg", content_hash="abc123"),
        width=300,
        height=200,
        options=ResampleOptionSet(),
    )
    return replace(base, **kw)


def test_key_is_deterministic_and_fixed_length():
    a = derive_cache_key(_spec())
    b = derive_cache_key(_spec())
    assert a == b
    assert len(a) == 64
    assert all(c in "0123456789abcdef" for c in a)


def test_known_canonical_form():
    assert canonical_form(_spec()) == "v1|abc123|300x200|fit|default|jpeg"


@pytest.mark.parametrize(
    "change",
    [
        {"width": 301},
        {"height": 201},
        {"options": ResampleOptionSet(method=ResampleMethod.fill_center)},
        {"options": ResampleOptionSet(filter=ResampleFilter.nearest)},
        {"options": ResampleOptionSet(format=ImageFormat.png)},
        {"file": FileDescriptor(root="/originals", rel_path="2024/a.jpg", content_hash="abc124")},
    ],
)
def test_any_field_change_changes_key(change):
    assert derive_cache_key(_spec(**change)) != derive_cache_key(_spec())


def test_swapped_dimensions_do_not_collide():
    assert derive_cache_key(_spec(width=200, height=300)) != derive_cache_key(_spec())


def test_file_location_is_not_part_of_key():
    moved = _spec(file=FileDescriptor(root="/elsewhere", rel_path="b.jpg", content_hash="abc123"))
    assert derive_cache_key(moved) == derive_cache_key(_spec())


def test_content_hash_is_used_verbatim():
    upper = _spec(file=FileDescriptor(root="/originals", rel_path="2024/a.jpg", content_hash="ABC123"))
    assert canonical_form(upper) == "v1|ABC123|300x200|fit|default|jpeg"
    assert derive_cache_key(upper) != derive_cache_key(_spec())
