"""Gamified workout log: XP, levels, achievements, streaks and challenges."""

__version__ = "0.1.0"
