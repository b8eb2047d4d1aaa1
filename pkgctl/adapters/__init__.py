"""Adapters — the layer that actually runs target commands."""
