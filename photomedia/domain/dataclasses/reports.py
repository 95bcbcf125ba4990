# photomedia/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Base report (shared fields + utilities)
# ---------------------------------------------------------------------------
@dataclass
class BaseReport:
    """Common report base:
    - timing: started_at / finished_at
    - error capture: error_details
    - helpers: start(), stop(), add_error(), as_dict()
    """
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    # Each tuple is (key/path, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now()

    def stop(self) -> None:
        self.finished_at = datetime.now()

    def add_error(self, subject: str, message: str) -> None:
        self.error_details.append((subject, message))

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Startup reconciliation of the thumbnail cache
# ---------------------------------------------------------------------------
@dataclass
class ReconcileReport(BaseReport):
    indexed: int = 0            # artifacts with image + valid sidecar
    orphan_images: int = 0      # image without sidecar (interrupted put)
    orphan_sidecars: int = 0    # sidecar whose image is gone
    temp_files: int = 0         # leftovers from an interrupted atomic write
    errors: int = 0


# ---------------------------------------------------------------------------
# Cleanup sweep (stale + capacity eviction)
# ---------------------------------------------------------------------------
@dataclass
class SweepReport(BaseReport):
    scanned: int = 0
    stale_removed: int = 0
    evicted: int = 0
    bytes_freed: int = 0
    bytes_remaining: int = 0
    errors: int = 0
