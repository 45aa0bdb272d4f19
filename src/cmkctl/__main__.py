"""Allow ``python -m cmkctl``."""

from cmkctl.cli import cli

if __name__ == "__main__":
    cli()
