"""Host session interfaces, session registry and chat broadcasting strategies."""
