from __future__ import annotations

from conditions_watch.cli import sample_main


if __name__ == "__main__":
    raise SystemExit(sample_main())
