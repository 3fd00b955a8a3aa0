# notifier/__init__.py
"""Notification API with Portuguese text repair."""

__version__ = "1.0.0"
