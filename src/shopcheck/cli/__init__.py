"""Command-line interface for shopcheck."""
