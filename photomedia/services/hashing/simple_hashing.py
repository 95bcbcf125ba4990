from __future__ import annotations

import hashlib
from pathlib import Path

from photomedia.domain.ports.hashing import HashingPort


class SimpleHashing(HashingPort):
    """
    Streaming content hasher for originals. The hex digest is what the file
    index stores and what thumbnail cache keys are derived from.
    """

    def __init__(self, algorithm: str = "sha256", chunk_size: int = 1024 * 1024) -> None:
        hashlib.new(algorithm)  # fail fast on unknown names
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    def content_hash(self, path: Path) -> str:
        if not isinstance(path, Path):
            path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File to hash not found: {path}")

        h = hashlib.new(self.algorithm)
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(self.chunk_size), b""):
                h.update(chunk)
        return h.hexdigest()
