"""Override record storage."""

from .override_store import JsonOverrideStore, OverrideStore

__all__ = ["JsonOverrideStore", "OverrideStore"]
