"""Conversation history and its on-disk format."""
