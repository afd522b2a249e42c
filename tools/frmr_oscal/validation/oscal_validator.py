"""
OSCAL validator using NIST oscal-cli

Optional, advisory validation of generated artifacts with the NIST oscal-cli
tool. Results never alter the generated documents.
"""

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Timeout constants (in seconds)
VERSION_CHECK_TIMEOUT = 30
DEFAULT_VALIDATION_TIMEOUT = 120

# oscal-cli needs Java; checked when JAVA_HOME is unset
JAVA_HOME_CANDIDATES = [
    Path("/opt/homebrew/Cellar/openjdk@17"),
    Path("/usr/local/Cellar/openjdk@17"),
]

OSCAL_ROOTS = {
    "catalog": "catalog",
    "mapping-collection": "mapping-collection",
}


class OSCALValidator:
    """Validator for OSCAL artifacts using NIST oscal-cli"""

    def __init__(self, oscal_cli_path: str = "oscal-cli"):
        self.oscal_cli_path = oscal_cli_path
        self.env = self._build_env()
        self._check_oscal_cli()

    def _build_env(self) -> Dict[str, str]:
        """Environment for oscal-cli, with JAVA_HOME detected when unset"""
        env = dict(os.environ)
        if env.get("JAVA_HOME"):
            return env

        for base in JAVA_HOME_CANDIDATES:
            if base.is_dir():
                versions = sorted(base.iterdir())
                if versions:
                    env["JAVA_HOME"] = str(versions[0])
                    logger.debug(f"Using JAVA_HOME={env['JAVA_HOME']}")
                    break

        return env

    def _check_oscal_cli(self) -> None:
        """Check if oscal-cli is available"""
        try:
            result = subprocess.run(
                [self.oscal_cli_path, "--version"],
                capture_output=True,
                text=True,
                check=True,
                env=self.env,
                timeout=VERSION_CHECK_TIMEOUT
            )
            logger.info(f"Using {result.stdout.strip() or self.oscal_cli_path}")
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError, PermissionError):
            raise RuntimeError(
                f"oscal-cli not found at {self.oscal_cli_path}. "
                "Install from https://github.com/metaschema-framework/oscal-cli"
            )

    def validate_file(self, file_path: Path) -> Dict[str, Any]:
        """Validate OSCAL file using oscal-cli"""
        logger.info(f"Validating OSCAL file: {file_path}")

        if not file_path.exists():
            return self._create_error_result(file_path, f"File not found: {file_path}")

        doc_type = self._detect_oscal_type(file_path)
        if not doc_type:
            return self._create_error_result(
                file_path,
                f"Could not determine OSCAL document type for {file_path}"
            )

        try:
            result = subprocess.run(
                [self.oscal_cli_path, "validate", str(file_path)],
                capture_output=True,
                text=True,
                env=self.env,
                timeout=DEFAULT_VALIDATION_TIMEOUT
            )
        except subprocess.TimeoutExpired:
            return self._create_error_result(file_path, f"Validation timeout for {file_path}")

        return self._parse_validation_result(file_path, doc_type, result)

    def _parse_validation_result(self, file_path: Path, doc_type: str,
                                 result: subprocess.CompletedProcess) -> Dict[str, Any]:
        """Parse oscal-cli validation output"""
        validation_result = {
            "file": str(file_path),
            "type": doc_type,
            "valid": result.returncode == 0,
            "exit_code": result.returncode,
            "errors": [],
            "warnings": []
        }

        for line in f"{result.stdout}\n{result.stderr}".split('\n'):
            line = line.strip()
            if not line:
                continue

            lowered = line.lower()
            if "warning" in lowered:
                validation_result["warnings"].append(line)
            elif any(keyword in lowered for keyword in ["error", "invalid", "failed"]):
                validation_result["errors"].append(line)

        return validation_result

    def _create_error_result(self, file_path: Path, error_message: str) -> Dict[str, Any]:
        """Create error result structure"""
        return {
            "file": str(file_path),
            "type": None,
            "valid": False,
            "exit_code": -1,
            "errors": [error_message],
            "warnings": []
        }

    def _detect_oscal_type(self, file_path: Path) -> Optional[str]:
        """Detect OSCAL document type from its root key"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            return None
        except IOError as e:
            logger.error(f"Could not read file {file_path}: {e}")
            return None

        if isinstance(content, dict):
            for oscal_key, cli_type in OSCAL_ROOTS.items():
                if oscal_key in content:
                    logger.debug(f"Detected OSCAL type '{cli_type}' for {file_path}")
                    return cli_type

        logger.warning(f"No recognized OSCAL document type found in {file_path}")
        return None
