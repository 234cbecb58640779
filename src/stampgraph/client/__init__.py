"""Stamp lookup collaborators."""

from .base import StampLookup
from .stampchain import StampchainClient

__all__ = ["StampLookup", "StampchainClient"]
