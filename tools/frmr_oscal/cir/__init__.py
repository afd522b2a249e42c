"""
Canonical Intermediate Representation (CIR) of the FRMR source

Provides the typed source model and the pre-flight source validator.
"""

from .model import (
    Domain,
    FlagImpact,
    FlatStatement,
    FRMRSource,
    GlossaryTerm,
    Indicator,
    LevelVariant,
    LevelVariantStatement,
    Process,
    Requirement,
    TextImpact,
)
from .validator import SourceValidator

__all__ = [
    'Domain',
    'FlagImpact',
    'FlatStatement',
    'FRMRSource',
    'GlossaryTerm',
    'Indicator',
    'LevelVariant',
    'LevelVariantStatement',
    'Process',
    'Requirement',
    'TextImpact',
    'SourceValidator'
]
