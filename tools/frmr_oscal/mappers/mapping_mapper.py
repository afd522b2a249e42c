"""
KSI to NIST SP 800-53 mapping mapper

Produces an OSCAL 1.2.0 mapping collection relating each KSI indicator to the
NIST SP 800-53 Rev 5 controls it aggregates.
"""

import logging
from typing import Any, Dict, List, Optional

from ..cir.model import FRMRSource, Indicator
from .base_mapper import BaseMapper

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_FILENAME = "fedramp-frmr-catalog.json"


class MappingMapper(BaseMapper):
    """Mapper for the KSI to NIST mapping collection"""

    TITLE = "FedRAMP KSI to NIST SP 800-53 Rev 5 Mapping"
    RELATIONSHIP = "superset-of"
    NIST_CATALOG_HREF = (
        "https://raw.githubusercontent.com/usnistgov/oscal-content/main/"
        "nist.gov/SP800-53/rev5/json/NIST_SP-800-53_rev5_catalog.json"
    )
    PROVENANCE = {
        "method": "hybrid",
        "matching-rationale": "functional",
        "status": "complete",
        "mapping-description": (
            "Maps FedRAMP Key Security Indicators to NIST SP 800-53 Rev 5 controls. "
            "KSI indicators aggregate multiple NIST controls into security outcomes."
        )
    }

    def __init__(self, catalog_filename: str = DEFAULT_CATALOG_FILENAME,
                 timestamp: Optional[str] = None):
        super().__init__(timestamp)
        self.catalog_filename = catalog_filename

    def map(self, source: FRMRSource) -> Dict[str, Any]:
        """Map FRMR KSI indicators to OSCAL mapping collection"""
        logger.info("Mapping KSI indicators to OSCAL mapping collection")

        maps = self._build_maps(source)

        mapping = {
            "uuid": self.generate_uuid("mapping", "fedramp-ksi-to-nist"),
            "source-resource": {
                "type": "catalog",
                "href": f"./{self.catalog_filename}"
            },
            "target-resource": {
                "type": "catalog",
                "href": self.NIST_CATALOG_HREF
            },
            "maps": maps
        }

        return {
            "mapping-collection": {
                "uuid": self.generate_uuid("mapping-collection", f"fedramp-ksi-nist-{source.version}"),
                "metadata": self.create_oscal_metadata(title=self.TITLE, version=source.version),
                "provenance": dict(self.PROVENANCE),
                "mappings": [mapping]
            }
        }

    def _build_maps(self, source: FRMRSource) -> List[Dict[str, Any]]:
        maps = []
        skipped = 0

        for domain in source.domains:
            for indicator in domain.indicators:
                if not indicator.controls:
                    skipped += 1
                    continue
                maps.append(self._build_map_entry(indicator))

        if skipped:
            logger.debug(f"Skipped {skipped} indicator(s) without NIST control references")

        return maps

    def _build_map_entry(self, indicator: Indicator) -> Dict[str, Any]:
        return {
            "uuid": self.generate_uuid("mapping-entry", indicator.key),
            "relationship": self.RELATIONSHIP,
            "sources": [
                {"type": "control", "id-ref": indicator.key.lower()}
            ],
            "targets": [
                {"type": "control", "id-ref": control}
                for control in indicator.controls
            ]
        }
