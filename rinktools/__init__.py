"""Tooling for a unit calculator: query tokens, styles, configuration and a child-side process sandbox."""

__version__ = "0.1.0"