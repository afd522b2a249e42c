"""
FRMR source validator

Pre-flight structural check of the raw FRMR document. Every check runs and
all violations are returned together; the caller decides whether to abort.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from jsonschema import Draft7Validator

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "frmr_source.json"


class SourceValidator:
    """Validator for FRMR source documents"""

    def __init__(self, schema_path: Optional[Path] = None):
        self.schema_path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH
        self.schema = self._load_schema()

    def _load_schema(self) -> Dict[str, Any]:
        """Load and check the FRMR shape schema"""
        with open(self.schema_path, 'r', encoding='utf-8') as f:
            schema = json.load(f)

        # Validate the schema itself
        Draft7Validator.check_schema(schema)
        logger.debug(f"Loaded schema: {self.schema_path.name}")
        return schema

    def validate(self, data: Any) -> List[str]:
        """Collect all structural violations in the source document"""
        if not isinstance(data, dict):
            return ["Source document must be a JSON object"]

        violations = []

        info = data.get("info")
        if not isinstance(info, dict) or not info.get("version"):
            violations.append("Missing info.version")

        frd = data.get("FRD")
        if not isinstance(frd, dict) or not isinstance(frd.get("data"), dict):
            violations.append("Missing FRD.data section")

        if not _non_empty_mapping(data.get("FRR")):
            violations.append("Missing or empty FRR section")

        if not _non_empty_mapping(data.get("KSI")):
            violations.append("Missing or empty KSI section")

        for req_key, req in _iter_requirements(data.get("FRR")):
            has_statement = bool(req.get("statement"))
            has_levels = bool(req.get("varies_by_level"))
            if not has_statement and not has_levels:
                violations.append(f"Requirement {req_key} has no statement or varies_by_level")
            elif has_statement and has_levels:
                violations.append(f"Requirement {req_key} has both statement and varies_by_level")

        violations.extend(self._schema_violations(data))

        if violations:
            logger.debug(f"Source validation found {len(violations)} violation(s)")
        else:
            logger.debug("Source validation successful")

        return violations

    def is_valid(self, data: Any) -> bool:
        return not self.validate(data)

    def _schema_violations(self, data: Dict[str, Any]) -> List[str]:
        """Type/shape errors reported by the JSON schema"""
        validator = Draft7Validator(self.schema)
        errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])

        violations = []
        for error in errors:
            path = "/".join(str(p) for p in error.absolute_path) or "<root>"
            violations.append(f"{path}: {error.message}")
        return violations


def _non_empty_mapping(value: Any) -> bool:
    return isinstance(value, dict) and len(value) > 0


def _iter_requirements(frr: Any) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """Yield (key, requirement) pairs from an FRR section, skipping malformed levels"""
    if not isinstance(frr, dict):
        return

    for process in frr.values():
        if not isinstance(process, dict) or not isinstance(process.get("data"), dict):
            continue
        for label_map in process["data"].values():
            if not isinstance(label_map, dict):
                continue
            for requirements in label_map.values():
                if not isinstance(requirements, dict):
                    continue
                for req_key, req in requirements.items():
                    if isinstance(req, dict):
                        yield req_key, req
