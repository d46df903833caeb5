"""Insyd: notifications for a social platform of architecture professionals."""

__version__ = "0.1.0"
