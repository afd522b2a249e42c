"""
OSCAL validation

Optional validation of generated OSCAL artifacts using NIST oscal-cli.
"""

from .oscal_validator import OSCALValidator

__all__ = [
    'OSCALValidator'
]
