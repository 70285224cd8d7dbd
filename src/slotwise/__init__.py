"""slotwise: constraint-based time slot finding over a local event calendar."""

from __future__ import annotations

__all__ = ["main"]


def main() -> int:
    from .cli import main as cli_main

    return cli_main()
