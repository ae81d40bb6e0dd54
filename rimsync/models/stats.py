"""
Dataclass for tracking sync run statistics.
"""

import time
from dataclasses import dataclass, field


@dataclass
class SyncStats:
    """Tracks what a sync run did with each manifest item."""

    items_total: int = 0
    items_downloaded: int = 0
    items_skipped_exists: int = 0
    items_copied_from_staging: int = 0
    dirs_removed: int = 0
    download_attempts: int = 0
    download_failures: int = 0
    dry_run: bool = False
    _start_time: float = field(default_factory=time.monotonic, repr=False)

    @property
    def items_placed(self) -> int:
        return self.items_downloaded + self.items_copied_from_staging

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self._start_time
