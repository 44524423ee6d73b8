"""Catalog data access."""
