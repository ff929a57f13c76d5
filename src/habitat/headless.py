from __future__ import annotations

from .app.headless import main, run_headless

__all__ = ["main", "run_headless"]

if __name__ == "__main__":
    raise SystemExit(main())
