"""Allow ``python -m trackerdash``."""

from __future__ import annotations

from trackerdash.cli.main import main

if __name__ == "__main__":
    main()
