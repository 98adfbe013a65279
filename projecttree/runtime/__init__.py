"""Runtime orchestration for the project tree.

Keeps the scan scheduler and controller behind a small import surface.
"""

from __future__ import annotations

from .controller import STATE_EMPTY, STATE_READY, STATE_SCANNING, ProjectTreeController
from .scan_scheduler import ScanResult, ScanScheduler

__all__ = [
    "STATE_EMPTY",
    "STATE_SCANNING",
    "STATE_READY",
    "ProjectTreeController",
    "ScanResult",
    "ScanScheduler",
]
