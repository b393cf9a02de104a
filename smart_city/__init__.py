"""Smart City complaint portal."""

__version__ = '1.0.0'
