"""Command line entry point for the catalog enrichment pipeline."""
