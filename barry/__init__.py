"""barry - reports over Mercury bank accounts and transactions."""

__version__ = "0.1.0"
