"""A small content-addressed version control system with branches, checkout and merge."""

__version__ = "0.1.0"
__all__ = ["__version__"]