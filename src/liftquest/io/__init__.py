"""Persistence and serialization."""
