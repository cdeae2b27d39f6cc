"""Submission Clean-up — deletes unsent submissions with their files and harvesting records."""

__version__ = "0.1.0"
