"""Entrypoint for `python -m UnlitBaker`."""

from .cli import main

if __name__ == "__main__":
    main()
