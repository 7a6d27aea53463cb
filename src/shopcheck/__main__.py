"""Allow running as python -m shopcheck."""

from shopcheck.cli.main import app

if __name__ == "__main__":
    app()
