"""Protocol interfaces for the position and strategy pipeline."""
from .chain import ChainClient
from .hints import HintLookup
from .position_source import PositionSource

__all__ = ["ChainClient", "HintLookup", "PositionSource"]
