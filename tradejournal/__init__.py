"""Trade Journal - log trades and review trading performance."""

__version__ = "0.1.0"
