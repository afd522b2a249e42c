"""
Source readers for frmr-oscal

Readers load the FRMR JSON source and hand it to the CIR model.
"""

from .base_reader import BaseReader
from .frmr_reader import FRMRReader

__all__ = [
    'BaseReader',
    'FRMRReader'
]
