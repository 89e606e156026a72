"""Normalization utilities for divino."""

from divino.normalization.engine import IdIssuer, NormalizationConfig, NormalizationEngine, normalize_wines

__all__ = [
    "IdIssuer",
    "NormalizationConfig",
    "NormalizationEngine",
    "normalize_wines",
]
