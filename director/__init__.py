"""Mood director: HTTP service that picks a face state for an expression snapshot."""
