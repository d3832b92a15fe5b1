"""Shared kernel — cross-cutting exception types."""
