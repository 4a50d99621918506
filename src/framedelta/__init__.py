"""framedelta package entrypoint."""

from framedelta.cli.app import main as _cli_main


def main() -> None:
    """Run the framedelta CLI."""
    _cli_main()
