"""
Base mapper class for OSCAL conversions

Provides common functionality for all FRMR to OSCAL mappers.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..cir.model import FRMRSource
from ..identifiers import identifier


class BaseMapper(ABC):
    """Base class for all FRMR to OSCAL mappers"""

    OSCAL_VERSION = "1.2.0"
    FEDRAMP_NS = "https://fedramp.gov/ns/oscal"
    PUBLISHER_NAME = "Federal Risk and Authorization Management Program (FedRAMP)"
    PUBLISHER_SHORT_NAME = "FedRAMP"
    PUBLISHER_HOMEPAGE = "https://www.fedramp.gov"

    def __init__(self, timestamp: Optional[str] = None):
        self.timestamp = timestamp or datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def generate_uuid(self, namespace: str, key: str) -> str:
        """Generate deterministic UUID for OSCAL objects"""
        return identifier(namespace, key)

    def create_oscal_metadata(self, title: str, **kwargs) -> Dict[str, Any]:
        """Create OSCAL metadata section with the FedRAMP publisher"""
        party_uuid = self.generate_uuid("party", "fedramp-pmo")

        metadata = {
            "title": title,
            "last-modified": self.timestamp,
            "version": kwargs.get("version", "1.0"),
            "oscal-version": self.OSCAL_VERSION,
            "roles": [{"id": "publisher", "title": "Document Publisher"}],
            "parties": [
                self.create_party(
                    self.PUBLISHER_NAME,
                    uuid_val=party_uuid,
                    short_name=self.PUBLISHER_SHORT_NAME,
                    links=[self.create_link(self.PUBLISHER_HOMEPAGE, "homepage")]
                )
            ],
            "responsible-parties": [
                {
                    "role-id": "publisher",
                    "party-uuids": [party_uuid]
                }
            ]
        }

        if kwargs.get("props"):
            metadata["props"] = kwargs["props"]

        return metadata

    def create_party(self, name: str, party_type: str = "organization",
                     uuid_val: Optional[str] = None, **kwargs) -> Dict[str, Any]:
        """Create OSCAL party object"""
        party = {
            "uuid": uuid_val or self.generate_uuid("party", name),
            "type": party_type,
            "name": name
        }

        if "short_name" in kwargs:
            party["short-name"] = kwargs["short_name"]

        if "links" in kwargs:
            party["links"] = kwargs["links"]

        return party

    def create_property(self, name: str, value: str, **kwargs) -> Dict[str, Any]:
        """Create OSCAL property object"""
        prop = {
            "name": name,
            "value": value
        }

        if "ns" in kwargs:
            prop["ns"] = kwargs["ns"]

        if "class" in kwargs:
            prop["class"] = kwargs["class"]

        return prop

    def fedramp_property(self, name: str, value: Any) -> Dict[str, Any]:
        """Create FedRAMP-namespaced property"""
        return self.create_property(name, str(value), ns=self.FEDRAMP_NS)

    def create_link(self, href: str, rel: Optional[str] = None, **kwargs) -> Dict[str, Any]:
        """Create OSCAL link object"""
        link = {"href": href}

        if rel:
            link["rel"] = rel

        if "text" in kwargs:
            link["text"] = kwargs["text"]

        return link

    @staticmethod
    def deduplicate_links(links: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Drop links repeating an earlier href+rel combination"""
        seen = set()
        unique = []
        for link in links:
            key = (link["href"], link.get("rel", ""))
            if key in seen:
                continue
            seen.add(key)
            unique.append(link)
        return unique

    @staticmethod
    def compact(obj: Dict[str, Any]) -> Dict[str, Any]:
        """Remove empty optional arrays (props, links, parts, ...)"""
        return {key: value for key, value in obj.items() if value != [] and value is not None}

    @abstractmethod
    def map(self, source: FRMRSource) -> Dict[str, Any]:
        """Map FRMR data to OSCAL format"""
        pass
