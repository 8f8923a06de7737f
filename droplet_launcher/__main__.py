"""
`python -m droplet_launcher …` forwards to the Typer CLI in `droplet_launcher.cli`.
"""

from __future__ import annotations

from droplet_launcher.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
