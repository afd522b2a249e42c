import json

import pytest

from frmr_oscal.readers import FRMRReader


def test_reads_json_object(tmp_path, minimal_frmr):
    path = tmp_path / "FRMR.documentation.json"
    path.write_text(json.dumps(minimal_frmr), encoding="utf-8")

    reader = FRMRReader(path)

    assert reader.read() == minimal_frmr
    assert len(reader.describe()["hash"]) == 64
    assert reader.to_source(reader.read()).version == "25.10A"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        FRMRReader(tmp_path / "missing.json")


def test_malformed_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="Failed to parse FRMR JSON"):
        FRMRReader(path).read()


def test_non_object_root(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError, match="must be a JSON object"):
        FRMRReader(path).read()
