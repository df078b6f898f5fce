"""commitgate - pre-commit gate for staged-path-scoped project checks."""

__version__ = "0.3.0"
