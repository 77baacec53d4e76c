"""Command line interface for namekit."""
