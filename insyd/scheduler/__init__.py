"""Scheduling module for periodic maintenance jobs."""

from .service import KeepaliveScheduler

__all__ = [
    "KeepaliveScheduler",
]
