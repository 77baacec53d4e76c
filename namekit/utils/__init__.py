"""Utility module for namekit."""
