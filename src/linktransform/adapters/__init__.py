"""Adapters between external payload formats and the domain layer."""
