"""Manifest loading."""
from .manifest import ConnectionSettings, Manifest, find_manifest

__all__ = ["ConnectionSettings", "Manifest", "find_manifest"]
