"""Request building, response scanning and transport for LLM endpoints."""
