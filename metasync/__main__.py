"""Module entrypoint for running metasync as ``python -m metasync``."""

from __future__ import annotations

from metasync.cli import main


if __name__ == "__main__":
    main()
