from __future__ import annotations
from pathlib import Path
from typing import Protocol

class HashingPort(Protocol):
    def content_hash(self, path: Path) -> str: ...
