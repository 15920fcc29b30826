"""streakbook — habit & journal consistency tracker."""

__version__ = "0.1.0"
