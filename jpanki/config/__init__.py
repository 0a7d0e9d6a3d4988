"""Configuration module for jpanki."""

from .settings import Config

__all__ = ['Config']
