"""Prometheus Alertmanager → CachetHQ incident bridge."""

__version__ = "1.0.0"
