"""Allow ``python -m namekit``."""

from namekit.cli.main import app

if __name__ == "__main__":
    app()
