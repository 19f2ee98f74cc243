"""Error types raised across the position and strategy pipeline.

Arithmetic failures are not wrapped: they surface as the ``ArithmeticError``
subclasses raised by the decimal context in :mod:`cdp_spells.fixed_point`.
"""
from __future__ import annotations


class DataUnavailable(Exception):
    """Position data could not be read from the chain."""


class ValidationError(Exception):
    """A field or strategy-level check failed.

    ``message`` is the single user-facing reason.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CompilationError(Exception):
    """Spells could not be produced; nothing is emitted."""


class RpcError(RuntimeError):
    """Every configured RPC endpoint failed."""
