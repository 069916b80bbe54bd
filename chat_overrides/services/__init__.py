"""Services package for the chat overrides plugin."""

from .chat_logger import ChatLogger

__all__ = ["ChatLogger"]
