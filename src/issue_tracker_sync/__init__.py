"""Issue tracker sync.

Collects issues matching a label policy from one repository into a single
checklist "tracker" issue on another (or the same) repository:
- configuration loaded from the environment / `.env` (GitHub Actions inputs)
- structured logging
- idempotent create-or-update of the tracker issue, keyed by title
"""

__version__ = "0.1.0"

from issue_tracker_sync.tracker.config import TrackerSettings

__all__ = ["__version__", "TrackerSettings"]
