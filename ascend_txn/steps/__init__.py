"""
Step catalog module.

Maps each transaction type to its ordered application steps and the pure
validators that gate advancing past them.
"""

from .catalog import StepCatalog, StepDefinition, PLACEHOLDER_LABELS
from .validators import ValidationIssue

__all__ = ["StepCatalog", "StepDefinition", "PLACEHOLDER_LABELS", "ValidationIssue"]
