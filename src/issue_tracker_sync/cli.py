"""Console entrypoint; the implementation lives in `issue_tracker_sync.tracker.main`."""

from __future__ import annotations

from issue_tracker_sync.tracker.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
