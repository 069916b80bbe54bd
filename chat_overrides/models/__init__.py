"""Data models for per-account chat overrides."""

from .override_record import GroupDefaults, OverrideRecord, Rgb

__all__ = ["GroupDefaults", "OverrideRecord", "Rgb"]
