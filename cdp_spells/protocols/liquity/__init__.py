"""Liquity protocol support."""
from .adapter import LiquityAdapter

__all__ = ["LiquityAdapter"]
