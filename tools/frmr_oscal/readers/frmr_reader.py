"""
FRMR JSON reader

Loads the FedRAMP machine-readable documentation (FRMR) file into memory and
converts it into the typed source model.
"""

import json
import logging
from typing import Any, Dict

from ..cir.model import FRMRSource
from .base_reader import BaseReader

logger = logging.getLogger(__name__)


class FRMRReader(BaseReader):
    """Reader for FRMR.documentation.json"""

    def read(self) -> Dict[str, Any]:
        """Parse the FRMR file, raising ValueError when it is not a JSON object"""
        logger.info(f"Reading FRMR source: {self.file_path}")

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse FRMR JSON {self.file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"FRMR source must be a JSON object: {self.file_path}")

        logger.debug(f"Source sha256: {self.file_hash}")
        return data

    @staticmethod
    def to_source(data: Dict[str, Any]) -> FRMRSource:
        """Convert a validated raw document into the typed model"""
        return FRMRSource.from_dict(data)
