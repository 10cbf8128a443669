"""Checklist-driven review of version-control diffs."""

__version__ = "0.1.0"
