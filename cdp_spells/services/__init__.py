"""Service modules"""
from .position_service import PositionService
from .runtime import Runtime
from .session import Selection, StrategySession
from .watcher import PositionWatcher

__all__ = [
    "PositionService",
    "PositionWatcher",
    "Runtime",
    "Selection",
    "StrategySession",
]
