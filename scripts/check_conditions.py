from __future__ import annotations

from conditions_watch.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
