"""
Retirement impact classification.

Maps a transaction type and amount to a coarse low/medium/high impact level
with a templated rationale.
"""

from .classifier import ImpactClassifier, level_rank

__all__ = ["ImpactClassifier", "level_rank"]
