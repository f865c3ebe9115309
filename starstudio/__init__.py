"""STAR Studio: behavioral interview practice with recorded answers and AI feedback."""

__version__ = "0.1.0"
