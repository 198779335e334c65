"""Shared infrastructure: models, storage, configuration."""
