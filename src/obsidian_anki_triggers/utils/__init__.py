"""Utility helpers (logging, retry)."""
