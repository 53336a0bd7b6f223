"""Configuration module -- exports Settings."""

from notemaster.config.settings import Settings

__all__ = ["Settings"]
