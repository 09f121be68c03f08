"""Command-line interface for Docs Catalog."""
