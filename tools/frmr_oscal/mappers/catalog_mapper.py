"""
FRMR catalog mapper

Converts the FRMR source to an OSCAL 1.2.0 catalog:

    catalog
    ├── metadata
    ├── groups (one per FRR process)
    │   └── controls (one per requirement)
    ├── group "key-security-indicators"
    │   └── groups (one per KSI domain)
    │       └── controls (one per indicator)
    └── back-matter (one resource per FRD term)
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from ..cir.model import (
    Domain,
    FlatStatement,
    FRMRSource,
    GlossaryTerm,
    Indicator,
    LevelVariantStatement,
    Process,
    Requirement,
)
from .base_mapper import BaseMapper
from .glossary_index import GlossaryIndex, resource_uuid

logger = logging.getLogger(__name__)

KSI_GROUP_ID = "key-security-indicators"
KSI_GROUP_TITLE = "Key Security Indicators"


class CatalogMapper(BaseMapper):
    """Mapper for the FedRAMP FRMR OSCAL catalog"""

    TITLE = "FedRAMP Requirements and Recommendations (FRMR) Catalog"

    def __init__(self, glossary_index: Optional[GlossaryIndex] = None,
                 timestamp: Optional[str] = None):
        super().__init__(timestamp)
        self.glossary_index = glossary_index

    def map(self, source: FRMRSource) -> Dict[str, Any]:
        """Map FRMR source to OSCAL catalog"""
        logger.info("Mapping FRMR data to OSCAL catalog")

        index = self.glossary_index
        if index is None:
            index = GlossaryIndex.build(source.glossary)

        groups = [self._build_process_group(process, index) for process in source.processes]
        groups.append(self._build_ksi_group(source.domains, index))

        self._check_unique_ids(groups)

        catalog = {
            "catalog": {
                "uuid": self.generate_uuid("catalog", f"fedramp-frmr-{source.version}"),
                "metadata": self._build_metadata(source),
                "groups": groups,
                "back-matter": self._build_back_matter(source.glossary)
            }
        }

        return catalog

    def _build_metadata(self, source: FRMRSource) -> Dict[str, Any]:
        props = [self.fedramp_property("source-version", source.version)]
        # OSCAL prop values must be non-blank
        if source.last_updated:
            props.append(self.fedramp_property("source-last-updated", source.last_updated))

        return self.create_oscal_metadata(
            title=self.TITLE,
            version=source.version,
            props=props
        )

    # FRR processes

    def _build_process_group(self, process: Process, index: GlossaryIndex) -> Dict[str, Any]:
        """Build one group per FRR process"""
        recurring = set(process.recurring_keys())
        if recurring:
            logger.debug(f"{process.key}: disambiguating {len(recurring)} recurring requirement key(s)")

        controls = [
            self._build_requirement_control(req, index, req.key in recurring)
            for req in process.requirements
        ]

        parts = []
        if process.purpose:
            parts.append({
                "name": "overview",
                "prose": process.purpose
            })

        if process.authorities:
            parts.append({
                "name": "instruction",
                "props": [self.fedramp_property("type", "authority")],
                "prose": self._render_authorities(process)
            })

        return self.compact({
            "id": process.key.lower(),
            "title": process.name,
            "props": [self.fedramp_property("short-name", process.short_name)],
            "parts": parts,
            "controls": controls
        })

    @staticmethod
    def _render_authorities(process: Process) -> str:
        paragraphs = []
        for authority in process.authorities:
            lines = [f"**{authority.reference}**", authority.description]
            if authority.delegation:
                lines.append(f"_Delegation: {authority.delegation}_")
            paragraphs.append("\n".join(lines))
        return "\n\n".join(paragraphs)

    def _build_requirement_control(self, req: Requirement, index: GlossaryIndex,
                                   needs_suffix: bool) -> Dict[str, Any]:
        """Build a control from an FRR requirement"""
        control_id = req.key.lower()
        if needs_suffix:
            control_id = f"{control_id}_{req.applicability.lower()}"

        # "label" is an OSCAL-standard prop name and stays un-namespaced
        props = [
            self.create_property("label", req.label),
            self.fedramp_property("applicability", req.applicability)
        ]
        props.extend(self.fedramp_property("fka", name) for name in req.prior_names)
        props.extend(self.fedramp_property("affects", party) for party in req.affects)

        parts = []
        statement = req.statement
        if isinstance(statement, LevelVariantStatement):
            parts.append(self._build_level_statement(control_id, statement))
        else:
            props.extend(self._timing_props(statement.keyword, statement.timeframe_type,
                                            statement.timeframe_num))
            parts.append(self._build_flat_statement(control_id, statement))

        if req.examples:
            parts.append({
                "id": f"{control_id}_guidance",
                "name": "guidance",
                "ns": self.FEDRAMP_NS,
                "prose": self._render_examples(req)
            })

        if req.notes:
            parts.append({
                "id": f"{control_id}_assessment",
                "name": "assessment",
                "ns": self.FEDRAMP_NS,
                "prose": "\n\n".join(req.notes)
            })

        if req.danger:
            props.append(self.fedramp_property("danger", req.danger))
        if req.impact is not None:
            props.append(self.fedramp_property("impact", req.impact.render()))

        for number, notification in enumerate(req.notifications, start=1):
            props.append(self.fedramp_property(f"notification-{number}-party", notification.party))
            props.append(self.fedramp_property(f"notification-{number}-method", notification.method))
            props.append(self.fedramp_property(f"notification-{number}-target", notification.target))

        links = self._term_links(req.terms, index)
        if req.reference_url:
            links.append(self._reference_link(req.reference_url, req.reference))

        return self.compact({
            "id": control_id,
            "title": req.name or req.key,
            "props": props,
            "links": self.deduplicate_links(links),
            "parts": parts
        })

    def _timing_props(self, keyword: Optional[str], timeframe_type: Optional[str],
                      timeframe_num: Optional[int]) -> List[Dict[str, Any]]:
        props = []
        if keyword:
            props.append(self.fedramp_property("keyword", keyword))
        if timeframe_type:
            props.append(self.fedramp_property("timeframe-type", timeframe_type))
        if timeframe_num is not None:
            props.append(self.fedramp_property("timeframe-num", timeframe_num))
        return props

    def _build_level_statement(self, control_id: str,
                               statement: LevelVariantStatement) -> Dict[str, Any]:
        """Parent statement part with one item per impact level, no prose of its own"""
        level_parts = []
        for variant in statement.variants:
            level_props = [self.fedramp_property("level", variant.level)]
            level_props.extend(self._timing_props(variant.keyword, variant.timeframe_type,
                                                  variant.timeframe_num))
            level_parts.append({
                "id": f"{control_id}_stmt_{variant.level.lower()}",
                "name": "item",
                "props": level_props,
                "prose": variant.text
            })

        return {
            "id": f"{control_id}_stmt",
            "name": "statement",
            "parts": level_parts
        }

    @staticmethod
    def _build_flat_statement(control_id: str, statement: FlatStatement) -> Dict[str, Any]:
        # Item ids embed their source list so the two numberings never collide
        items = [
            {"id": f"{control_id}_stmt_item_{number}", "name": "item", "prose": text}
            for number, text in enumerate(statement.items, start=1)
        ]
        items.extend(
            {"id": f"{control_id}_stmt_bullet_{number}", "name": "item", "prose": text}
            for number, text in enumerate(statement.bullets, start=1)
        )

        part = {
            "id": f"{control_id}_stmt",
            "name": "statement",
            "prose": statement.text
        }
        if items:
            part["parts"] = items
        return part

    @staticmethod
    def _render_examples(req: Requirement) -> str:
        blocks = []
        for example in req.examples:
            lines = [f"**{example.id}**"]
            if example.key_tests:
                lines.append("Key tests:")
                lines.extend(f"- {test}" for test in example.key_tests)
            lines.extend(f"- {text}" for text in example.examples)
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    def _term_links(self, terms: Iterable[str], index: GlossaryIndex) -> List[Dict[str, Any]]:
        """Links to glossary resources; terms missing from the glossary are skipped"""
        links = []
        for term in terms:
            term_uuid = index.resolve(term)
            if term_uuid is None:
                logger.debug(f"Unresolved glossary term: {term}")
                continue
            links.append(self.create_link(f"#{term_uuid}", "term", text=term))
        return links

    def _reference_link(self, href: str, text: Optional[str]) -> Dict[str, Any]:
        if text:
            return self.create_link(href, "reference", text=text)
        return self.create_link(href, "reference")

    # KSI domains

    def _build_ksi_group(self, domains: Iterable[Domain], index: GlossaryIndex) -> Dict[str, Any]:
        return {
            "id": KSI_GROUP_ID,
            "title": KSI_GROUP_TITLE,
            "groups": [self._build_domain_group(domain, index) for domain in domains]
        }

    def _build_domain_group(self, domain: Domain, index: GlossaryIndex) -> Dict[str, Any]:
        return self.compact({
            "id": domain.id.lower(),
            "title": domain.name,
            "props": [self.fedramp_property("theme", domain.theme)],
            "controls": [self._build_indicator_control(indicator, index)
                         for indicator in domain.indicators]
        })

    def _build_indicator_control(self, indicator: Indicator, index: GlossaryIndex) -> Dict[str, Any]:
        control_id = indicator.key.lower()

        links = [
            self.create_link(f"#{control}", "related", text=control.upper())
            for control in indicator.controls
        ]
        links.extend(self._term_links(indicator.terms, index))
        if indicator.reference_url:
            links.append(self._reference_link(indicator.reference_url, indicator.reference))

        return self.compact({
            "id": control_id,
            "title": indicator.name,
            "props": [self.fedramp_property("fka", name) for name in indicator.prior_names],
            "links": self.deduplicate_links(links),
            "parts": [{
                "id": f"{control_id}_stmt",
                "name": "statement",
                "prose": indicator.statement
            }]
        })

    # Back-matter

    def _build_back_matter(self, glossary: Iterable[GlossaryTerm]) -> Dict[str, Any]:
        """One resource per FRD term, in source order"""
        resources = []

        for term in glossary:
            resource = {
                "uuid": resource_uuid(term),
                "title": term.name,
                "description": term.definition
            }

            if term.reference:
                citation = {"text": term.reference}
                if term.reference_url:
                    citation["links"] = [self.create_link(term.reference_url)]
                resource["citation"] = citation

            props = [self.fedramp_property("term-id", term.key)]
            props.extend(self.fedramp_property("fka", name) for name in term.prior_names)
            resource["props"] = props

            resources.append(resource)

        return {"resources": resources}

    @staticmethod
    def _check_unique_ids(groups: List[Dict[str, Any]]) -> None:
        """Fail fast if any group, control or part id repeats"""
        seen: Set[str] = set()
        duplicates = []

        def visit(node: Dict[str, Any]) -> None:
            node_id = node.get("id")
            if node_id is not None:
                if node_id in seen:
                    duplicates.append(node_id)
                seen.add(node_id)
            for child_key in ("groups", "controls", "parts"):
                for child in node.get(child_key, []):
                    visit(child)

        for group in groups:
            visit(group)

        if duplicates:
            raise ValueError(f"Duplicate catalog ids: {', '.join(sorted(set(duplicates)))}")
