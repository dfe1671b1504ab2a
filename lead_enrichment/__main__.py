"""Run the CLI as ``python -m lead_enrichment``."""
from __future__ import annotations

import sys

from .cli import main as cli_main

PROG = "python -m lead_enrichment"


def main(argv: list[str] | None = None) -> int:
    return cli_main(argv, prog=PROG)


if __name__ == "__main__":  # pragma: no cover - module entry point
    sys.exit(main())
