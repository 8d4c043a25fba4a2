"""Vanity key work server."""
