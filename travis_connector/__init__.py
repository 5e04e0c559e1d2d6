"""Travis CI connector for BI extracts."""

__version__ = "1.0.0"
