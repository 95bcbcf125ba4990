import pytest

from photomedia.domain.enums.fallback_reason import FallbackReason
from photomedia.services.thumbs.fallback import BROKEN_ICON_SVG, PHOTO_ICON_SVG, FallbackResolver


def test_missing_source_flags_the_file():
    flagged = []
    ph = FallbackResolver(on_missing=flagged.append).resolve(FallbackReason.source_missing, "f123")
    assert flagged == ["f123"]
    assert ph.data == BROKEN_ICON_SVG
    assert ph.media_type == "image/svg+xml"


@pytest.mark.parametrize(
    "reason, icon",
    [
        ("source_corrupt", BROKEN_ICON_SVG),
        ("token_invalid", PHOTO_ICON_SVG),
    ],
)
def test_other_reasons_do_not_touch_the_index(reason, icon):
    flagged = []
    ph = FallbackResolver(on_missing=flagged.append).resolve(reason, "f123")
    assert flagged == []
    assert ph.data == icon


def test_index_errors_still_yield_a_placeholder():
    def boom(file_id):
        raise RuntimeError("db gone")

    ph = FallbackResolver(on_missing=boom).resolve(FallbackReason.source_missing, "f1")
    assert ph.data == BROKEN_ICON_SVG


def test_without_file_id_nothing_is_flagged():
    flagged = []
    FallbackResolver(on_missing=flagged.append).resolve(FallbackReason.source_missing)
    assert flagged == []
    # no callback at all is fine too
    assert FallbackResolver().resolve("source_missing", "f1").data == BROKEN_ICON_SVG


def test_unknown_reason_is_rejected():
    with pytest.raises(ValueError):
        FallbackResolver().resolve("nope")
