"""Expiry lookup, inference and persistence."""
