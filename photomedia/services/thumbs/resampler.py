# photomedia/services/thumbs/resampler.py
from __future__ import annotations

import io
from pathlib import Path
from typing import Dict, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from photomedia.common.logging import get_logger
from photomedia.domain.entities.thumbnail import GeneratedImage, ThumbnailSpec
from photomedia.domain.enums.resample import ImageFormat, ResampleFilter, ResampleMethod
from photomedia.domain.errors import DecodeFailed, EncodeFailed, SourceMissing

logger = get_logger()

_FILTERS: Dict[ResampleFilter, Image.Resampling] = {
    ResampleFilter.default: Image.Resampling.LANCZOS,
    ResampleFilter.nearest: Image.Resampling.NEAREST,
}

# ImageOps.fit centering per crop anchor
_CENTERING: Dict[ResampleMethod, Tuple[float, float]] = {
    ResampleMethod.fill_center: (0.5, 0.5),
    ResampleMethod.fill_top_left: (0.0, 0.0),
    ResampleMethod.fill_bottom_right: (1.0, 1.0),
}


def fit_size(src: Tuple[int, int], box: Tuple[int, int]) -> Tuple[int, int]:
    """
    Largest size with the source aspect ratio that fits inside `box`.
    Sources already inside the box are left at their size (no upscaling).
    """
    sw, sh = src
    bw, bh = box
    if sw <= bw and sh <= bh:
        return sw, sh
    scale = min(bw / sw, bh / sh)
    return max(1, min(bw, round(sw * scale))), max(1, min(bh, round(sh * scale)))


class ResamplingEngine:
    """
    Decode -> crop/scale -> encode, entirely in memory. Persisting the bytes is
    the store's job, so this stays side-effect free.
    """

    def __init__(self, *, jpeg_quality: int = 90, max_pixels: int = 4096 * 4096) -> None:
        self.jpeg_quality = int(jpeg_quality)
        self.max_pixels = int(max_pixels)

    def generate(self, spec: ThumbnailSpec, source_path: Path) -> GeneratedImage:
        spec.validate(self.max_pixels)
        src = self._decode(Path(source_path))
        try:
            out = self._resample(src, spec)
        finally:
            src.close()
        return self._encode(out, spec.options.format)

    # ---- internals ----
    def _decode(self, path: Path) -> Image.Image:
        try:
            with Image.open(path) as im:
                im.load()
                oriented = ImageOps.exif_transpose(im)
                # detach from the file handle before it closes
                img = oriented if oriented is not None and oriented is not im else im.copy()
        except FileNotFoundError as e:
            raise SourceMissing(f"thumbs: source vanished: {path}") from e
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            raise DecodeFailed(f"thumbs: cannot decode {path}: {e}") from e
        return self._normalize_mode(img)

    @staticmethod
    def _normalize_mode(img: Image.Image) -> Image.Image:
        if img.mode in ("RGB", "RGBA", "L"):
            return img
        has_alpha = img.mode in ("LA", "PA", "RGBa", "La") or "transparency" in img.info
        return img.convert("RGBA" if has_alpha else "RGB")

    def _resample(self, img: Image.Image, spec: ThumbnailSpec) -> Image.Image:
        method = spec.options.method
        resample = _FILTERS[spec.options.filter]
        box = (spec.width, spec.height)

        if method in _CENTERING:
            return ImageOps.fit(img, box, method=resample, centering=_CENTERING[method])
        if method is ResampleMethod.resize:
            return img.resize(box, resample=resample)
        # fit
        size = fit_size(img.size, box)
        if size == img.size:
            return img.copy()
        return img.resize(size, resample=resample)

    def _encode(self, img: Image.Image, fmt: ImageFormat) -> GeneratedImage:
        buf = io.BytesIO()
        try:
            if fmt is ImageFormat.png:
                img.save(buf, format="PNG", optimize=True)
            else:
                if img.mode != "RGB":
                    img = img.convert("RGB")
                img.save(buf, format="JPEG", quality=self.jpeg_quality, optimize=True, progressive=True)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeFailed(f"thumbs: {fmt.value} encoder failed: {e}") from e
        return GeneratedImage(data=buf.getvalue(), width=img.width, height=img.height, format=fmt)
