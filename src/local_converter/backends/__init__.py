"""Conversion backends and their registry."""

from local_converter.backends.registry import BackendRegistry, create_default_registry

__all__ = ["BackendRegistry", "create_default_registry"]
