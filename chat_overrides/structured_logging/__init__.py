"""
Structured logging package for the chat overrides plugin.

All imports should use explicit paths like
'from chat_overrides.structured_logging.enhanced_logging_config import get_logger'.

The directory is named 'structured_logging' rather than 'logging' to avoid
shadowing the standard library module.
"""

__all__: list[str] = []
