# photomedia/services/thumbs/store.py
from __future__ import annotations

import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from photomedia.common.logging import get_logger
from photomedia.domain.dataclasses.reports import ReconcileReport, SweepReport
from photomedia.domain.entities.thumbnail import ThumbnailArtifact
from photomedia.domain.enums.resample import ImageFormat
from photomedia.domain.errors import WriteFailed
from photomedia.domain.policies.artifact_paths import artifact_rel_path, sidecar_rel_path

logger = get_logger()

_TMP_PREFIX = ".tmp-"
_IMAGE_SUFFIXES = {f".{f.ext}" for f in ImageFormat}


def _atomic_write(target: Path, data: bytes) -> None:
    """Write to a temp file in the target directory, then os.replace() into place."""
    target.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("wb", prefix=_TMP_PREFIX, delete=False, dir=str(target.parent)) as tf:
        tmp = Path(tf.name)
        try:
            tf.write(data)
            tf.flush()
            os.fsync(tf.fileno())
        except BaseException:
            tf.close()
            tmp.unlink(missing_ok=True)
            raise
    try:
        os.replace(tmp, target)
    finally:
        tmp.unlink(missing_ok=True)


class FilesystemThumbnailStore:
    """
    Maps cache keys to artifacts under `root`:

        <root>/ab/cd/<key>.jpg|png   encoded thumbnail
        <root>/ab/cd/<key>.json      metadata; written last, so its presence
                                     means the image is complete

    A concurrent get() never sees a half-written artifact: both files are
    published with os.replace(), image first.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._index: Dict[str, ThumbnailArtifact] = {}
        self._lock = threading.Lock()

    # --------- Reads ---------

    def get(self, key: str) -> Optional[ThumbnailArtifact]:
        with self._lock:
            art = self._index.get(key)
        if art is not None and Path(art.path).is_file():
            return art

        art = self._load_sidecar(self.root / sidecar_rel_path(key))
        if art is None or art.key != key or not Path(art.path).is_file():
            with self._lock:
                self._index.pop(key, None)
            return None
        with self._lock:
            self._index[key] = art
        return art

    def stats(self) -> Dict[str, int]:
        arts = list(self._iter_artifacts())
        return {"count": len(arts), "bytes": sum(a.size_bytes for a in arts)}

    # --------- Writes ---------

    def put(
        self,
        key: str,
        data: bytes,
        *,
        source_hash: str,
        width: int,
        height: int,
        format: ImageFormat,
    ) -> ThumbnailArtifact:
        existing = self.get(key)
        if existing is not None:
            # artifacts are immutable once written
            return existing

        img_path = self.root / artifact_rel_path(key, format)
        art = ThumbnailArtifact(
            key=key,
            path=str(img_path),
            size_bytes=len(data),
            created_at=datetime.now(timezone.utc),
            source_hash=source_hash,
            width=width,
            height=height,
            format=format,
        )
        try:
            _atomic_write(img_path, data)
            _atomic_write(self.root / sidecar_rel_path(key), json.dumps(art.as_dict()).encode("utf-8"))
        except OSError as e:
            img_path.unlink(missing_ok=True)
            raise WriteFailed(f"thumbs: cannot write {img_path}: {e}") from e

        with self._lock:
            self._index[key] = art
        return art

    def invalidate(self, key: str) -> None:
        """Remove an artifact. Unknown keys are not an error."""
        with self._lock:
            self._index.pop(key, None)
        sidecar = self.root / sidecar_rel_path(key)
        # sidecar first so readers stop resolving the key before the image goes
        sidecar.unlink(missing_ok=True)
        for fmt in ImageFormat:
            (self.root / artifact_rel_path(key, fmt)).unlink(missing_ok=True)

    def invalidate_source(self, source_hash: str) -> int:
        """Drop every artifact derived from the given content hash."""
        n = 0
        for art in list(self._iter_artifacts()):
            if art.source_hash == source_hash:
                self.invalidate(art.key)
                n += 1
        if n:
            logger.info("thumbs: invalidated %d artifact(s) for source %s", n, source_hash)
        return n

    # --------- Maintenance ---------

    def reconcile(self) -> ReconcileReport:
        """
        Startup pass: rebuild the in-memory index from sidecars and remove
        leftovers of interrupted writes.
        """
        rpt = ReconcileReport()
        rpt.start()
        index: Dict[str, ThumbnailArtifact] = {}
        sidecar_keys = set()

        files: List[Path] = [p for p in self.root.rglob("*") if p.is_file()]
        for p in files:
            if p.name.startswith(_TMP_PREFIX):
                p.unlink(missing_ok=True)
                rpt.temp_files += 1
            elif p.suffix == ".json":
                art = self._load_sidecar(p)
                if art is None or art.key != p.stem or not Path(art.path).is_file():
                    p.unlink(missing_ok=True)
                    rpt.orphan_sidecars += 1
                    if art is None:
                        rpt.errors += 1
                        rpt.add_error(str(p), "unreadable sidecar")
                    continue
                index[art.key] = art
                sidecar_keys.add(art.key)

        for p in files:
            if p.suffix in _IMAGE_SUFFIXES and not p.name.startswith(_TMP_PREFIX) and p.stem not in sidecar_keys:
                p.unlink(missing_ok=True)
                rpt.orphan_images += 1

        with self._lock:
            self._index = index
        rpt.indexed = len(index)
        rpt.stop()
        logger.info(
            "thumbs: reconciled cache %s (indexed=%d orphan_images=%d orphan_sidecars=%d temp=%d)",
            self.root, rpt.indexed, rpt.orphan_images, rpt.orphan_sidecars, rpt.temp_files,
        )
        return rpt

    def sweep(
        self,
        is_current: Callable[[str], bool],
        max_bytes: Optional[int] = None,
    ) -> SweepReport:
        """
        Cleanup pass, run outside the request path:
          1) delete artifacts whose source hash is no longer current
          2) if max_bytes is set, evict oldest artifacts until the total fits
        """
        rpt = SweepReport()
        rpt.start()
        live: List[ThumbnailArtifact] = []
        for art in self._iter_artifacts():
            rpt.scanned += 1
            try:
                current = is_current(art.source_hash)
            except Exception as e:
                rpt.errors += 1
                rpt.add_error(art.key, str(e))
                live.append(art)
                continue
            if current:
                live.append(art)
            else:
                self.invalidate(art.key)
                rpt.stale_removed += 1
                rpt.bytes_freed += art.size_bytes

        total = sum(a.size_bytes for a in live)
        if max_bytes is not None and total > max_bytes:
            for art in sorted(live, key=lambda a: a.created_at):
                if total <= max_bytes:
                    break
                self.invalidate(art.key)
                total -= art.size_bytes
                rpt.evicted += 1
                rpt.bytes_freed += art.size_bytes

        rpt.bytes_remaining = total
        rpt.stop()
        return rpt

    # --------- internals ---------

    def _iter_artifacts(self) -> Iterator[ThumbnailArtifact]:
        for p in self.root.rglob("*.json"):
            art = self._load_sidecar(p)
            if art is not None and Path(art.path).is_file():
                yield art

    @staticmethod
    def _load_sidecar(path: Path) -> Optional[ThumbnailArtifact]:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("thumbs: cannot read sidecar %s: %s", path, e)
            return None
        try:
            return ThumbnailArtifact.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("thumbs: bad sidecar %s: %s", path, e)
            return None
