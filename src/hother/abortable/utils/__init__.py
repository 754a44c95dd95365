"""Helpers built on top of cancellation tokens."""
