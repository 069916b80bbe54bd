"""
Effective chat attribute resolution.

Each attribute falls back independently from the session's cached override to
its group default; the first value that is not None wins.
"""

from dataclasses import dataclass

from ..models.override_record import Rgb
from ..realtime.host_protocols import PlayerSession
from .color_codec import parse_color
from .session_cache import SessionOverrideCache


@dataclass(frozen=True)
class ResolvedAttributes:
    """The prefix, suffix and color a chat message is rendered with."""

    prefix: str
    suffix: str
    color: Rgb


class AttributeResolver:
    """Combines the session cache with group defaults."""

    def __init__(self, cache: SessionOverrideCache) -> None:
        self.cache = cache

    def resolve(self, session: PlayerSession) -> ResolvedAttributes:
        """
        Compute effective prefix, suffix and color for a session.

        Raises:
            InvalidColorFormat: the cached override holds a color that does not parse
        """
        group = session.group
        record = self.cache.get(session.index)
        if record is None:
            return ResolvedAttributes(group.prefix, group.suffix, group.chat_color)

        prefix = record.prefix if record.prefix is not None else group.prefix
        suffix = record.suffix if record.suffix is not None else group.suffix
        color = parse_color(record.color) if record.color is not None else group.chat_color
        return ResolvedAttributes(prefix, suffix, color)
