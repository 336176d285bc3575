"""Cognition Scheduler — attention-budget scheduling for background cognitive work."""

__version__ = "0.1.0"
