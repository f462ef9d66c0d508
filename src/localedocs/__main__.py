"""Run the CLI with `python -m localedocs`."""

from __future__ import annotations

import sys

from .main import run


def main() -> None:
    """Run the CLI with process arguments."""
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":  # pragma: no cover
    main()
