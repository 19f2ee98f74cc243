"""CDP position computer and spell builder for Reflexer and Liquity."""

__version__ = "0.1.0"
