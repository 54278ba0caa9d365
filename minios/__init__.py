"""A small simulated multi-user shell over a virtual directory tree kept in text files."""

__version__ = "0.1.0"
__all__ = ["__version__"]