"""Top-level package for grind, the CodeGrinder command-line client."""

__version__ = "2.1.0"

import typer

app = typer.Typer(help="Command-line interface to CodeGrinder")

# Import submodules at the end to register their commands
from grind import cli  # noqa: E402, F401

if __name__ == "__main__":
    app()
