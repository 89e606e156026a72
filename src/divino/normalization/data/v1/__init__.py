"""Normalization dictionary v1."""

from divino.normalization.data.v1.aliases import ALIASES
from divino.normalization.data.v1.terms import TERMS

__all__ = ["TERMS", "ALIASES"]
