"""Utility helpers for the catalog store."""
