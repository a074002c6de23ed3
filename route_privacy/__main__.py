"""Module entry point: python -m route_privacy ..."""

from __future__ import annotations

from route_privacy.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
