"""Configuration package for barry."""

from .settings import Settings, load_config

__all__ = ['Settings', 'load_config']
