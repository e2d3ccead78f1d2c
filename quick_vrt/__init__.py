"""Quick visual regression testing for pairs of web pages."""

__version__ = "1.1.1"
