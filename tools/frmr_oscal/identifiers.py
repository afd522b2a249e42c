"""
Deterministic identifiers for OSCAL objects

UUID v5 (SHA-1, name-based) so the same FRMR input always produces identical
OSCAL UUIDs. Each entity type gets its own sub-namespace, derived from the DNS
namespace and a fixed label, so a glossary term and a mapping entry sharing a
key never share a UUID.
"""

import uuid
from functools import lru_cache

ROOT_NAMESPACE = uuid.NAMESPACE_DNS

NAMESPACE_LABELS = {
    "catalog": "fedramp-frmr-catalog",
    "glossary-term": "fedramp-frd-term",
    "frr-control": "fedramp-frr-control",
    "ksi-control": "fedramp-ksi-control",
    "mapping-collection": "fedramp-ksi-nist-mapping",
    "mapping-entry": "fedramp-mapping-entry",
    "party": "fedramp-party",
    "group": "fedramp-group",
    "mapping": "fedramp-mapping",
}


@lru_cache(maxsize=None)
def namespace_for(namespace_tag: str) -> uuid.UUID:
    """Sub-namespace UUID for an entity category"""
    label = NAMESPACE_LABELS.get(namespace_tag, f"fedramp-{namespace_tag}")
    return uuid.uuid5(ROOT_NAMESPACE, label)


def identifier(namespace_tag: str, semantic_key: str) -> str:
    """Generate a deterministic UUID for an entity category and key

    >>> identifier("glossary-term", "FRD-ACV") == identifier("glossary-term", "FRD-ACV")
    True
    """
    return str(uuid.uuid5(namespace_for(namespace_tag), semantic_key))
