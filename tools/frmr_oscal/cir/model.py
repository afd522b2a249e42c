"""
Typed FRMR source model

The FRMR JSON is loosely typed: a requirement carries either a flat statement
or per-level variants, and impact is either free text or a map of flags. These
unions are resolved once here, at the boundary, into explicit variants so the
mappers never inspect raw JSON.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(item) for item in value)


def _timeframe_num(value: Any) -> Optional[int]:
    """JSON numbers like 30.0 carry an integral day count"""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _prior_names(raw: Dict[str, Any]) -> Tuple[str, ...]:
    """Collect formerly-known-as names (fka, fkas) in source order"""
    names = []
    if raw.get("fka"):
        names.append(str(raw["fka"]))
    names.extend(_str_tuple(raw.get("fkas")))
    return tuple(names)


@dataclass(frozen=True)
class GlossaryTerm:
    """FRD term definition"""
    key: str
    applicability: str
    name: str
    definition: str
    aliases: Tuple[str, ...] = ()
    prior_names: Tuple[str, ...] = ()
    reference: Optional[str] = None
    reference_url: Optional[str] = None

    @classmethod
    def from_dict(cls, key: str, applicability: str, raw: Dict[str, Any]) -> "GlossaryTerm":
        return cls(
            key=key,
            applicability=applicability,
            name=raw.get("term", key),
            definition=raw.get("definition", ""),
            aliases=_str_tuple(raw.get("alts")),
            prior_names=_prior_names(raw),
            reference=raw.get("reference") or None,
            reference_url=raw.get("reference_url") or None,
        )


@dataclass(frozen=True)
class FlatStatement:
    """Single statement with optional follow-up lists"""
    text: str
    keyword: Optional[str] = None
    timeframe_type: Optional[str] = None
    timeframe_num: Optional[int] = None
    items: Tuple[str, ...] = ()
    bullets: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LevelVariant:
    """Statement variant for one impact level"""
    level: str
    text: str
    keyword: Optional[str] = None
    timeframe_type: Optional[str] = None
    timeframe_num: Optional[int] = None


@dataclass(frozen=True)
class LevelVariantStatement:
    """Statement that differs by impact level"""
    variants: Tuple[LevelVariant, ...]


Statement = Union[FlatStatement, LevelVariantStatement]


@dataclass(frozen=True)
class TextImpact:
    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class FlagImpact:
    """Impact expressed as named boolean flags"""
    flags: Tuple[Tuple[str, bool], ...]

    def render(self) -> str:
        return ",".join(name for name, enabled in self.flags if enabled)


Impact = Union[TextImpact, FlagImpact]


def parse_impact(value: Any) -> Optional[Impact]:
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        return FlagImpact(tuple((str(name), bool(flag)) for name, flag in value.items()))
    return TextImpact(str(value))


@dataclass(frozen=True)
class Example:
    id: str
    key_tests: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Notification:
    party: str
    method: str
    target: str


@dataclass(frozen=True)
class Requirement:
    """FRR requirement located by applicability and label"""
    key: str
    applicability: str
    label: str
    statement: Statement
    name: Optional[str] = None
    examples: Tuple[Example, ...] = ()
    notes: Tuple[str, ...] = ()
    notifications: Tuple[Notification, ...] = ()
    terms: Tuple[str, ...] = ()
    prior_names: Tuple[str, ...] = ()
    affects: Tuple[str, ...] = ()
    danger: Optional[str] = None
    impact: Optional[Impact] = None
    reference: Optional[str] = None
    reference_url: Optional[str] = None

    @property
    def varies_by_level(self) -> bool:
        return isinstance(self.statement, LevelVariantStatement)

    @classmethod
    def from_dict(cls, key: str, applicability: str, label: str,
                  raw: Dict[str, Any]) -> "Requirement":
        """Build a requirement, enforcing statement/varies_by_level exclusivity"""
        has_statement = bool(raw.get("statement"))
        has_levels = bool(raw.get("varies_by_level"))

        if has_statement and has_levels:
            raise ValueError(f"Requirement {key} has both statement and varies_by_level")
        if not has_statement and not has_levels:
            raise ValueError(f"Requirement {key} has no statement or varies_by_level")

        if has_levels:
            statement = LevelVariantStatement(tuple(
                LevelVariant(
                    level=level,
                    text=variant.get("statement", ""),
                    keyword=variant.get("primary_key_word"),
                    timeframe_type=variant.get("timeframe_type"),
                    timeframe_num=_timeframe_num(variant.get("timeframe_num")),
                )
                for level, variant in raw["varies_by_level"].items()
            ))
        else:
            statement = FlatStatement(
                text=raw["statement"],
                keyword=raw.get("primary_key_word"),
                timeframe_type=raw.get("timeframe_type"),
                timeframe_num=_timeframe_num(raw.get("timeframe_num")),
                items=_str_tuple(raw.get("following_information")),
                bullets=_str_tuple(raw.get("following_information_bullets")),
            )

        # Singular note precedes the notes list
        notes = []
        if raw.get("note"):
            notes.append(raw["note"])
        notes.extend(_str_tuple(raw.get("notes")))

        return cls(
            key=key,
            applicability=applicability,
            label=label,
            statement=statement,
            name=raw.get("name") or None,
            examples=tuple(
                Example(
                    id=str(example.get("id", "")),
                    key_tests=_str_tuple(example.get("key_tests")),
                    examples=_str_tuple(example.get("examples")),
                )
                for example in raw.get("examples") or []
            ),
            notes=tuple(notes),
            notifications=tuple(
                Notification(
                    party=entry.get("party", ""),
                    method=entry.get("method", ""),
                    target=entry.get("target", ""),
                )
                for entry in raw.get("notification") or []
            ),
            terms=_str_tuple(raw.get("terms")),
            prior_names=_prior_names(raw),
            affects=_str_tuple(raw.get("affects")),
            danger=raw.get("danger") or None,
            impact=parse_impact(raw.get("impact")),
            reference=raw.get("reference") or None,
            reference_url=raw.get("reference_url") or None,
        )


@dataclass(frozen=True)
class Authority:
    reference: str
    description: str
    delegation: Optional[str] = None
    reference_url: Optional[str] = None


@dataclass(frozen=True)
class Process:
    """FRR process with its requirements flattened in source order"""
    key: str
    name: str
    short_name: str
    purpose: Optional[str] = None
    authorities: Tuple[Authority, ...] = ()
    requirements: Tuple[Requirement, ...] = ()

    @classmethod
    def from_dict(cls, key: str, raw: Dict[str, Any]) -> "Process":
        info = raw.get("info") or {}
        front_matter = info.get("front_matter") or {}

        requirements = []
        for applicability, label_map in (raw.get("data") or {}).items():
            for label, entries in label_map.items():
                for req_key, req in entries.items():
                    requirements.append(Requirement.from_dict(req_key, applicability, label, req))

        return cls(
            key=key,
            name=info.get("name", key),
            short_name=info.get("short_name", key),
            purpose=front_matter.get("purpose") or None,
            authorities=tuple(
                Authority(
                    reference=auth.get("reference", ""),
                    description=auth.get("description", ""),
                    delegation=auth.get("delegation") or None,
                    reference_url=auth.get("reference_url") or None,
                )
                for auth in front_matter.get("authority") or []
            ),
            requirements=tuple(requirements),
        )

    def recurring_keys(self) -> List[str]:
        """Requirement keys present under more than one applicability"""
        seen: Dict[str, List[str]] = {}
        for req in self.requirements:
            partitions = seen.setdefault(req.key, [])
            if req.applicability not in partitions:
                partitions.append(req.applicability)
        return [key for key, partitions in seen.items() if len(partitions) > 1]


@dataclass(frozen=True)
class Indicator:
    """KSI indicator"""
    key: str
    name: str
    statement: str
    controls: Tuple[str, ...] = ()
    terms: Tuple[str, ...] = ()
    prior_names: Tuple[str, ...] = ()
    reference: Optional[str] = None
    reference_url: Optional[str] = None

    @classmethod
    def from_dict(cls, key: str, raw: Dict[str, Any]) -> "Indicator":
        return cls(
            key=key,
            name=raw.get("name", key),
            statement=raw.get("statement", ""),
            controls=_str_tuple(raw.get("controls")),
            terms=_str_tuple(raw.get("terms")),
            prior_names=_prior_names(raw),
            reference=raw.get("reference") or None,
            reference_url=raw.get("reference_url") or None,
        )


@dataclass(frozen=True)
class Domain:
    """KSI domain (theme plus ordered indicators)"""
    key: str
    id: str
    name: str
    theme: str
    indicators: Tuple[Indicator, ...] = ()

    @classmethod
    def from_dict(cls, key: str, raw: Dict[str, Any]) -> "Domain":
        return cls(
            key=key,
            id=raw.get("id", key),
            name=raw.get("name", key),
            theme=raw.get("theme", ""),
            indicators=tuple(
                Indicator.from_dict(indicator_key, indicator)
                for indicator_key, indicator in (raw.get("indicators") or {}).items()
            ),
        )


@dataclass(frozen=True)
class FRMRSource:
    """Complete FRMR document"""
    version: str
    last_updated: str = ""
    title: str = ""
    glossary: Tuple[GlossaryTerm, ...] = ()
    processes: Tuple[Process, ...] = ()
    domains: Tuple[Domain, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FRMRSource":
        """Build the typed model from a validated FRMR document"""
        info = data.get("info") or {}
        frd_data = (data.get("FRD") or {}).get("data") or {}

        return cls(
            version=str(info.get("version", "")),
            last_updated=str(info.get("last_updated", "")),
            title=info.get("title", ""),
            glossary=tuple(
                GlossaryTerm.from_dict(term_key, applicability, entry)
                for applicability, terms in frd_data.items()
                for term_key, entry in terms.items()
            ),
            processes=tuple(
                Process.from_dict(key, process)
                for key, process in (data.get("FRR") or {}).items()
            ),
            domains=tuple(
                Domain.from_dict(key, domain)
                for key, domain in (data.get("KSI") or {}).items()
            ),
        )

    @property
    def requirement_count(self) -> int:
        return sum(len(process.requirements) for process in self.processes)

    @property
    def indicator_count(self) -> int:
        return sum(len(domain.indicators) for domain in self.domains)
