"""Grocery expiry tracker service package."""
