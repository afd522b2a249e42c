"""
Glossary cross-reference index

Maps term text (display name and alternate names, case-folded) to the UUID of
the back-matter resource that defines it.
"""

import logging
from typing import Dict, Iterable, Optional

from ..cir.model import GlossaryTerm
from ..identifiers import identifier

logger = logging.getLogger(__name__)

GLOSSARY_NAMESPACE = "glossary-term"


class GlossaryIndex:
    """Read-only lookup from term text to glossary resource UUID"""

    def __init__(self, entries: Dict[str, str]):
        self._entries = dict(entries)

    @classmethod
    def build(cls, terms: Iterable[GlossaryTerm]) -> "GlossaryIndex":
        """Index every term name and alias; later registrations win"""
        entries: Dict[str, str] = {}

        for term in terms:
            term_uuid = resource_uuid(term)
            for text in (term.name, *term.aliases):
                key = text.casefold()
                previous = entries.get(key)
                if previous is not None and previous != term_uuid:
                    logger.debug(f"Glossary text '{text}' re-registered by {term.key}")
                entries[key] = term_uuid

        logger.debug(f"Glossary index built with {len(entries)} entries")
        return cls(entries)

    def resolve(self, text: str) -> Optional[str]:
        return self._entries.get(text.casefold())

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and text.casefold() in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def resource_uuid(term: GlossaryTerm) -> str:
    """UUID of the back-matter resource for a glossary term"""
    return identifier(GLOSSARY_NAMESPACE, term.key)
