"""Bundled sentence catalog."""
