"""Bundled case framework catalog."""
