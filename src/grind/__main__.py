"""Module entrypoint for `python -m grind`."""

from grind.cli import main

if __name__ == "__main__":
    main()
