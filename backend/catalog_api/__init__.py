"""Catalog cache, stores and the read-only HTTP API."""
