"""purge-runs - delete old GitHub Actions workflow runs."""

__version__ = "0.1.0"
