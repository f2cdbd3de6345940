"""Proximity-triggered narration service for the Vinh Khanh food street."""

__version__ = "1.0.0"
