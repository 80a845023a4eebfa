"""Release reporting for tagged git repositories."""

__version__ = "0.1.0"
