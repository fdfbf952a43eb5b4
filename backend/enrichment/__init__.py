"""Enrichment passes that populate the catalog cache from external providers."""
