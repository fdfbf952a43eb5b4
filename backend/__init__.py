"""Streamguide backend packages."""
