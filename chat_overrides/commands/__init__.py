"""Administrative commands for editing override records."""

from .override_commands import OverrideCommandService, handle_override_command

__all__ = ["OverrideCommandService", "handle_override_command"]
