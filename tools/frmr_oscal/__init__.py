"""
frmr-oscal - FedRAMP FRMR to OSCAL converter

Converts the FedRAMP machine-readable documentation (FRMR: FRD definitions,
FRR requirements, KSI indicators) into OSCAL 1.2.0 JSON artifacts.

Key features:
- Deterministic UUID v5 identifiers; repeated runs are byte-identical
  apart from timestamps
- OSCAL catalog with FRR process groups, KSI domain groups and FRD
  glossary resources
- OSCAL mapping collection from KSI indicators to NIST SP 800-53 Rev 5
- Optional validation with NIST oscal-cli

Architecture:
    FRMR JSON → Reader → Source validation → CIR model → Mappers → OSCAL JSON → oscal-cli
"""

__version__ = "1.0.0"
__author__ = "frmr-oscal contributors"
__license__ = "Apache-2.0"

from .cli import cli

__all__ = ['cli']
