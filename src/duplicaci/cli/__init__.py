"""Command line interface for duplicaci."""

from .dispatcher import main

__all__ = ["main"]
