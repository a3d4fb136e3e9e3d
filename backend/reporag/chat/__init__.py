"""Conversation state for chat sessions."""

from .memory import DEFAULT_MAX_TURNS, ConversationMemory

__all__ = ["DEFAULT_MAX_TURNS", "ConversationMemory"]
