"""Console output for barry reports."""

from .console_display import ConsoleDisplay

__all__ = ['ConsoleDisplay']
