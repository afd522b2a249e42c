"""
Base reader class for frmr-oscal

Provides common functionality for source readers.
"""

import hashlib
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict


class BaseReader(ABC):
    """Base class for all source readers"""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise FileNotFoundError(f"Input file not found: {file_path}")

        self.file_hash = self._calculate_file_hash()
        self.extraction_date = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def _calculate_file_hash(self) -> str:
        """Calculate SHA-256 hash of input file"""
        hasher = hashlib.sha256()
        with open(self.file_path, 'rb') as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hasher.update(chunk)
        return hasher.hexdigest()

    @abstractmethod
    def read(self) -> Dict[str, Any]:
        """Read the raw source document"""
        pass

    def describe(self) -> Dict[str, Any]:
        """Source attribution for logs and reports"""
        return {
            "source_file": str(self.file_path),
            "extraction_date": self.extraction_date,
            "hash": self.file_hash
        }
