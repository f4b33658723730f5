"""Semantic versions and Cargo version requirements."""
