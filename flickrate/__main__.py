"""Allow ``python -m flickrate``."""

from flickrate.cli.main import cli


if __name__ == "__main__":
    cli()
