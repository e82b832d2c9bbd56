"""Append-only activity log helpers."""
