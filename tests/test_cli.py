import json
import os
import sys

import pytest
from click.testing import CliRunner

from conftest import TIMESTAMP
from frmr_oscal.cir.model import FRMRSource
from frmr_oscal.cli import build_artifacts, cli, write_artifacts


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def source_file(tmp_path, full_frmr):
    path = tmp_path / "FRMR.documentation.json"
    path.write_text(json.dumps(full_frmr), encoding="utf-8")
    return path


def test_build_writes_both_documents(runner, tmp_path, source_file):
    output = tmp_path / "out"

    result = runner.invoke(cli, ["build", str(source_file), "-o", str(output), "--skip-oscal-cli"])

    assert result.exit_code == 0, result.output
    catalog = json.loads((output / "fedramp-frmr-catalog.json").read_text(encoding="utf-8"))
    mapping = json.loads((output / "fedramp-ksi-nist-mapping.json").read_text(encoding="utf-8"))
    assert "catalog" in catalog
    assert mapping["mapping-collection"]["mappings"][0]["source-resource"]["href"] == \
        "./fedramp-frmr-catalog.json"


def test_build_with_custom_names(runner, tmp_path, source_file):
    output = tmp_path / "out"

    result = runner.invoke(cli, [
        "build", str(source_file), "-o", str(output), "--skip-oscal-cli",
        "--catalog-name", "catalog.json", "--mapping-name", "mapping.json"
    ])

    assert result.exit_code == 0, result.output
    mapping = json.loads((output / "mapping.json").read_text(encoding="utf-8"))
    assert mapping["mapping-collection"]["mappings"][0]["source-resource"]["href"] == "./catalog.json"
    assert (output / "catalog.json").exists()


def test_build_aborts_on_incomplete_source(runner, tmp_path, minimal_frmr):
    del minimal_frmr["KSI"]
    source = tmp_path / "incomplete.json"
    source.write_text(json.dumps(minimal_frmr), encoding="utf-8")
    output = tmp_path / "out"

    result = runner.invoke(cli, ["build", str(source), "-o", str(output), "--skip-oscal-cli"])

    assert result.exit_code == 1
    assert not (output / "fedramp-frmr-catalog.json").exists()
    assert not (output / "fedramp-ksi-nist-mapping.json").exists()


def test_build_aborts_on_malformed_json(runner, tmp_path):
    source = tmp_path / "broken.json"
    source.write_text("{", encoding="utf-8")

    result = runner.invoke(cli, ["build", str(source), "-o", str(tmp_path / "out"), "--skip-oscal-cli"])

    assert result.exit_code == 1
    assert not (tmp_path / "out").exists()


def test_build_without_oscal_cli_installed(runner, tmp_path, source_file):
    result = runner.invoke(cli, [
        "build", str(source_file), "-o", str(tmp_path / "out"),
        "--oscal-cli-path", str(tmp_path / "no-such-oscal-cli")
    ])

    assert result.exit_code == 0, result.output


def test_check_command(runner, tmp_path, source_file, minimal_frmr):
    assert runner.invoke(cli, ["check", str(source_file)]).exit_code == 0

    del minimal_frmr["FRR"]
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps(minimal_frmr), encoding="utf-8")
    assert runner.invoke(cli, ["check", str(broken)]).exit_code == 1


def test_build_artifacts_share_timestamp(full_frmr):
    catalog, mapping = build_artifacts(FRMRSource.from_dict(full_frmr), timestamp=TIMESTAMP)

    assert catalog["catalog"]["metadata"]["last-modified"] == TIMESTAMP
    assert mapping["mapping-collection"]["metadata"]["last-modified"] == TIMESTAMP


def test_write_artifacts_is_all_or_nothing(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    first = tmp_path / "catalog.json"

    with pytest.raises(OSError):
        write_artifacts([(first, {"catalog": {}}), (blocker / "mapping.json", {"mapping-collection": {}})])

    assert not first.exists()


def test_write_artifacts_leaves_no_partial_file(tmp_path, monkeypatch):
    first = tmp_path / "catalog.json"
    second = tmp_path / "mapping.json"
    real_open = open

    class DiskFull:
        def __init__(self, f):
            self.f = f

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self.f.close()

        def write(self, payload):
            self.f.write(payload[:10])
            raise OSError(28, "No space left on device")

    def failing_open(path, *args, **kwargs):
        f = real_open(path, *args, **kwargs)
        if os.path.basename(path).startswith(".mapping"):
            return DiskFull(f)
        return f

    monkeypatch.setattr(sys.modules["frmr_oscal.cli"], "open", failing_open, raising=False)

    with pytest.raises(OSError):
        write_artifacts([(first, {"catalog": {}}), (second, {"mapping-collection": {}})])

    assert not first.exists()
    assert not second.exists()
    assert list(tmp_path.iterdir()) == []


def test_write_artifacts_replaces_existing_files(tmp_path):
    target = tmp_path / "catalog.json"
    target.write_text("stale", encoding="utf-8")

    write_artifacts([(target, {"catalog": {}})])

    assert json.loads(target.read_text(encoding="utf-8")) == {"catalog": {}}
    assert list(tmp_path.iterdir()) == [target]
