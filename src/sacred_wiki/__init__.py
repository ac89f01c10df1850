"""Sacred Madness wiki link graph and research assistant services."""

__version__ = "1.0.0"
