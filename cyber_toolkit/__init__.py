"""Cyber Toolkit — reconcile installed tools against declared roles."""

__version__ = "0.1.1"
