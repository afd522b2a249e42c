"""
OSCAL mappers for frmr-oscal

Mappers convert the typed FRMR source to OSCAL 1.2.0 JSON artifacts.
All identifiers are deterministic so repeated runs produce identical output.
"""

from .base_mapper import BaseMapper
from .catalog_mapper import CatalogMapper
from .glossary_index import GlossaryIndex
from .mapping_mapper import MappingMapper

__all__ = [
    'BaseMapper',
    'CatalogMapper',
    'GlossaryIndex',
    'MappingMapper'
]
