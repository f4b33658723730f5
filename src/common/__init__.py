"""Helpers shared across the reconciler's layers."""
