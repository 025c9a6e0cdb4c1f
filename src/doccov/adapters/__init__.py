"""Adapters that translate external formats into doccov's own models."""
