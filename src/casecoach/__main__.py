"""Module entrypoint for `python -m casecoach`."""

from __future__ import annotations

from .main import main_entry


def main() -> None:
    """Run the practice shell."""
    main_entry()


if __name__ == "__main__":  # pragma: no cover
    main()
