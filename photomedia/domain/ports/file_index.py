from __future__ import annotations
from typing import Protocol
from photomedia.domain.entities.thumbnail import FileDescriptor

class FileIndexPort(Protocol):
    def lookup_file(self, file_id: str) -> FileDescriptor: ...   # raises SourceMissing
    def mark_missing(self, file_id: str) -> None: ...
