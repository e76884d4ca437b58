"""Family Legacy - build and browse a family tree."""

__version__ = "0.1.0"
