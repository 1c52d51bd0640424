"""Failure notifications."""

from .forgejo import ForgejoNotifier, NotifierError

__all__ = ["ForgejoNotifier", "NotifierError"]
