"""
Override record and group default models.

An OverrideRecord holds the per-account customizations an administrator has
assigned. Each field is independently optional: None means "use the group
default", while an empty string is a real override to "nothing".
"""

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class Rgb(NamedTuple):
    """A 24-bit color as three 0-255 channels."""

    r: int
    g: int
    b: int


class OverrideRecord(BaseModel):
    """Per-account chat customization stored independently of group membership."""

    model_config = ConfigDict(
        # Security: reject unknown fields to prevent injection
        extra="forbid",
        validate_assignment=True,
    )

    account_id: str = Field(..., min_length=1, description="Account identity, unique key in the store")
    prefix: str | None = Field(default=None, description="Text prepended to the display name")
    suffix: str | None = Field(default=None, description="Text appended to the display name")
    color: str | None = Field(default=None, description="Chat color as stored, 'r,g,b'")
    permissions: set[str] = Field(default_factory=set, description="Permissions granted regardless of group")

    def has_permission(self, permission: str) -> bool:
        """Exact, case-sensitive membership test."""
        return permission in self.permissions

    def is_empty(self) -> bool:
        """True when the record no longer overrides anything."""
        return self.prefix is None and self.suffix is None and self.color is None and not self.permissions


class GroupDefaults(BaseModel):
    """Read-only chat defaults of a host permission group."""

    model_config = ConfigDict(frozen=True)

    name: str
    prefix: str = ""
    suffix: str = ""
    chat_color: Rgb = Rgb(255, 255, 255)
