"""Packaged default settings."""
