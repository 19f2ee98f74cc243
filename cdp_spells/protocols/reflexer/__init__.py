"""Reflexer protocol support."""
from .adapter import ReflexerAdapter

__all__ = ["ReflexerAdapter"]
