"""rootcause - trace external diagnostic context back to a root cause."""

__version__ = "0.1.0"
