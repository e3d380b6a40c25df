"""Split.io admin API client and declarative data sources."""

__version__ = "0.1.0"
